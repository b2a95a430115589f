"""Reading single entries out of ISO9660 disc images."""

import os
import struct
from pathlib import Path
from typing import BinaryIO

import structlog

from ..models import DEFAULT_ENTRY_NAME
from .errors import ArchiveError, ArchiveOpenError, EntryNotFoundError

log = structlog.stdlib.get_logger()

SECTOR_SIZE = 2048
# Volume descriptors start at sector 16
VOLUME_DESCRIPTOR_OFFSET = 16 * SECTOR_SIZE
STANDARD_IDENTIFIER = b"CD001"

VD_PRIMARY = 1
VD_TERMINATOR = 255

# Offsets into the primary volume descriptor
PVD_BLOCK_SIZE = 128
PVD_ROOT_RECORD = 156

# Offsets into a directory record
DR_EXTENT = 2
DR_DATA_LENGTH = 10
DR_FLAGS = 25
DR_NAME_LENGTH = 32
DR_NAME = 33
DR_MIN_LENGTH = 34

FLAG_DIRECTORY = 0x02


class ArchiveInspector:
    """Extracts one named entry from a disc image into memory.

    The image is treated as an ISO9660 container. Only the volume
    descriptors and the directories on the way to the entry are read.
    """

    def __init__(
        self,
        entry_name: str = DEFAULT_ENTRY_NAME,
        max_entry_size: int = 1024 * 1024,
        max_directory_size: int = 1024 * 1024,
    ) -> None:
        """Initialize the archive inspector.

        Args:
            entry_name: Default entry to extract, ``/`` separates directories
            max_entry_size: Entries larger than this are rejected
            max_directory_size: Directories larger than this are rejected
        """
        self.entry_name = entry_name
        self.max_entry_size = max_entry_size
        self.max_directory_size = max_directory_size

    def read_entry(self, path: Path, entry_name: str | None = None) -> bytes:
        """Return the raw bytes of an entry in the disc image at ``path``.

        Raises:
            ArchiveOpenError: If the file cannot be opened or is not ISO9660
            EntryNotFoundError: If no entry has that exact name
            ArchiveError: If the entry or a directory on the way is truncated or too large
        """
        name = entry_name or self.entry_name

        try:
            image = open(path, "rb")
        except OSError as e:
            raise ArchiveOpenError(str(path), e.strerror or str(e), original_error=e) from e

        with image:
            file_size = os.fstat(image.fileno()).st_size
            block_size, root_extent, root_length = self._read_root_record(image, path)

            extent, length = root_extent, root_length
            components = [c for c in name.split("/") if c]
            for depth, component in enumerate(components):
                want_directory = depth < len(components) - 1
                found = self._find_record(image, path, file_size, block_size, extent, length, component, want_directory)
                if found is None:
                    log.debug("Entry not found in disc image", path=str(path), entry=name)
                    raise EntryNotFoundError(str(path), name)
                extent, length = found

            if length > self.max_entry_size:
                raise ArchiveError(
                    message=f"entry {name} is too large ({length} bytes)",
                    path=str(path),
                )

            data = self._read_at(image, extent * block_size, length)
            if len(data) != length:
                raise ArchiveError(message=f"entry {name} is truncated", path=str(path))

        log.debug("Extracted entry from disc image", path=str(path), entry=name, size=len(data))
        return data

    def _read_root_record(self, image: BinaryIO, path: Path) -> tuple[int, int, int]:
        """Locate the primary volume descriptor and return the root directory.

        Returns:
            Tuple of (logical block size, root extent, root data length)
        """
        offset = VOLUME_DESCRIPTOR_OFFSET
        while True:
            descriptor = self._read_at(image, offset, SECTOR_SIZE)
            if len(descriptor) < SECTOR_SIZE or descriptor[1:6] != STANDARD_IDENTIFIER:
                raise ArchiveOpenError(str(path), "not an ISO9660 image")

            descriptor_type = descriptor[0]
            if descriptor_type == VD_TERMINATOR:
                raise ArchiveOpenError(str(path), "no primary volume descriptor")
            if descriptor_type == VD_PRIMARY:
                break
            offset += SECTOR_SIZE

        block_size = struct.unpack_from("<H", descriptor, PVD_BLOCK_SIZE)[0] or SECTOR_SIZE
        root = descriptor[PVD_ROOT_RECORD:PVD_ROOT_RECORD + DR_MIN_LENGTH]
        extent = struct.unpack_from("<I", root, DR_EXTENT)[0]
        length = struct.unpack_from("<I", root, DR_DATA_LENGTH)[0]
        return block_size, extent, length

    def _find_record(
        self,
        image: BinaryIO,
        path: Path,
        file_size: int,
        block_size: int,
        extent: int,
        length: int,
        name: str,
        want_directory: bool,
    ) -> tuple[int, int] | None:
        """Search one directory for a record called ``name``.

        Returns:
            Tuple of (extent, data length) of the record, or None
        """
        offset = extent * block_size
        if length > self.max_directory_size:
            raise ArchiveError(message=f"directory is too large ({length} bytes)", path=str(path))
        if offset + length > file_size:
            raise ArchiveError(message="directory is truncated", path=str(path))

        directory = self._read_at(image, offset, length)
        if len(directory) != length:
            raise ArchiveError(message="directory is truncated", path=str(path))

        pos = 0
        while pos < len(directory):
            record_length = directory[pos]
            if record_length == 0:
                # Records never span blocks; the rest of this block is padding
                pos = (pos // block_size + 1) * block_size
                continue
            if record_length < DR_MIN_LENGTH or pos + record_length > len(directory):
                break

            record = directory[pos:pos + record_length]
            name_length = record[DR_NAME_LENGTH]
            identifier = record[DR_NAME:DR_NAME + name_length]
            is_directory = bool(record[DR_FLAGS] & FLAG_DIRECTORY)

            # Single-byte 0x00 and 0x01 identifiers are the . and .. entries
            if identifier not in (b"\x00", b"\x01"):
                if is_directory == want_directory and _entry_name(identifier) == name:
                    return (
                        struct.unpack_from("<I", record, DR_EXTENT)[0],
                        struct.unpack_from("<I", record, DR_DATA_LENGTH)[0],
                    )

            pos += record_length

        return None

    @staticmethod
    def _read_at(image: BinaryIO, offset: int, size: int) -> bytes:
        image.seek(offset)
        return image.read(size)


def _entry_name(identifier: bytes) -> str:
    """Normalize an ISO9660 file identifier: drop ``;<version>`` and a trailing dot."""
    name = identifier.decode("ascii", errors="replace")
    name = name.split(";", 1)[0]
    if name.endswith("."):
        name = name[:-1]
    return name
