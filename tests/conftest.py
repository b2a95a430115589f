"""Shared fixtures: minimal ISO9660 images built on the fly."""

import struct
from collections.abc import Callable
from pathlib import Path
from typing import Union

import pytest

BLOCK = 2048
ROOT_LBA = 18

Tree = dict[str, Union[bytes, "Tree"]]


def _both_endian32(value: int) -> bytes:
    return struct.pack("<I", value) + struct.pack(">I", value)


def _both_endian16(value: int) -> bytes:
    return struct.pack("<H", value) + struct.pack(">H", value)


def _record(identifier: bytes, extent: int, size: int, directory: bool) -> bytes:
    length = 33 + len(identifier)
    padding = b"\x00" if length % 2 else b""
    return (
        bytes([length + len(padding), 0])
        + _both_endian32(extent)
        + _both_endian32(size)
        + bytes(7)  # recording date
        + bytes([0x02 if directory else 0x00, 0, 0])
        + _both_endian16(1)
        + bytes([len(identifier)])
        + identifier
        + padding
    )


def build_iso(tree: Tree) -> bytes:
    """Build an ISO9660 image holding ``tree``.

    Keys are raw identifiers (include ``;1`` for files); bytes values are
    files and dict values are subdirectories. Each directory must fit in
    one block.
    """
    next_lba = [ROOT_LBA + 1]

    def allocate(size: int) -> int:
        lba = next_lba[0]
        next_lba[0] += max(1, -(-size // BLOCK))
        return lba

    def layout(node: Tree, lba: int, parent_lba: int) -> list[tuple[int, bytes]]:
        records = [_record(b"\x00", lba, BLOCK, True), _record(b"\x01", parent_lba, BLOCK, True)]
        chunks: list[tuple[int, bytes]] = []
        for name, value in node.items():
            if isinstance(value, dict):
                child = allocate(BLOCK)
                records.append(_record(name.encode("ascii"), child, BLOCK, True))
                chunks += layout(value, child, lba)
            else:
                data_lba = allocate(len(value))
                records.append(_record(name.encode("ascii"), data_lba, len(value), False))
                chunks.append((data_lba, value))
        directory = b"".join(records)
        assert len(directory) <= BLOCK
        chunks.append((lba, directory))
        return chunks

    chunks = layout(tree, ROOT_LBA, ROOT_LBA)
    image = bytearray(next_lba[0] * BLOCK)

    pvd = bytearray(BLOCK)
    pvd[0] = 1
    pvd[1:6] = b"CD001"
    pvd[6] = 1
    pvd[128:132] = _both_endian16(BLOCK)
    pvd[156:190] = _record(b"\x00", ROOT_LBA, BLOCK, True)
    image[16 * BLOCK:17 * BLOCK] = pvd

    terminator = bytearray(BLOCK)
    terminator[0] = 255
    terminator[1:6] = b"CD001"
    terminator[6] = 1
    image[17 * BLOCK:18 * BLOCK] = terminator

    for lba, data in chunks:
        image[lba * BLOCK:lba * BLOCK + len(data)] = data

    return bytes(image)


def ps2_system_cnf(title_id: str = "SLUS_210.77", vmode: str = "NTSC") -> bytes:
    return (
        f"BOOT2 = cdrom0:\\{title_id};1\r\n"
        f"VER = 1.00\r\n"
        f"VMODE = {vmode}\r\n"
    ).encode("ascii")


@pytest.fixture
def make_iso() -> Callable[[Path, Tree], Path]:
    """Write an ISO9660 image to a path and return the path."""
    def _make(path: Path, tree: Tree) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_iso(tree))
        return path
    return _make


@pytest.fixture
def make_ps2_iso(make_iso: Callable[[Path, Tree], Path]) -> Callable[..., Path]:
    """Write a PS2 disc image whose SYSTEM.CNF names ``title_id``."""
    def _make(path: Path, title_id: str = "SLUS_210.77", vmode: str = "NTSC") -> Path:
        return make_iso(path, {
            "SYSTEM.CNF;1": ps2_system_cnf(title_id, vmode),
            "SLUS_210.77;1": b"\x7fELF" + bytes(60),
        })
    return _make


@pytest.fixture
def set_root_length() -> Callable[[Path, int], None]:
    """Overwrite the root directory's data length in an image's primary volume descriptor."""
    def _set(path: Path, length: int) -> None:
        with open(path, "r+b") as f:
            f.seek(16 * BLOCK + 156 + 10)
            f.write(_both_endian32(length))
    return _set
