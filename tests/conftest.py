import struct
import zlib
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from c64_map.palette_data import build_palette


@pytest.fixture(scope="session")
def palette():
    return build_palette()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def write_png():
    def _write(path: Path, rgb: np.ndarray) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(rgb.astype(np.uint8)).save(path)
        return path

    return _write


@pytest.fixture
def write_oversized_png():
    """PNG whose header claims 20000x20000 pixels but carries almost no data."""

    def _chunk(kind: bytes, data: bytes) -> bytes:
        body = kind + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body))

    def _write(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        ihdr = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
        path.write_bytes(
            b"\x89PNG\r\n\x1a\n"
            + _chunk(b"IHDR", ihdr)
            + _chunk(b"IDAT", zlib.compress(b"\x00" * 16))
            + _chunk(b"IEND", b"")
        )
        return path

    return _write
