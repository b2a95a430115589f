"""SYSTEM.CNF parsing and title ID resolution.

A SYSTEM.CNF is a short line-oriented ASCII file at the root of a
PlayStation disc, for example::

    BOOT2 = cdrom0:\\SLUS_210.77;1
    VER = 1.00
    VMODE = NTSC
"""

import re
from collections.abc import Iterator, Mapping

import structlog

from .errors import NoTitleIdError, NotAsciiError

log = structlog.stdlib.get_logger()

BOOT2_KEY = "BOOT2"
VMODE_KEY = "VMODE"

# cdrom0:\SLUS_210.77;1, cdrom0:\SLUS_210.77 and cdrom:\SLES_001.01 are all seen in the wild
TITLE_ID_PATTERN = r"(?:cdrom\d?:\\)?(?P<title_id>.+?)(?:;\d+)?"

# ASCII whitespace, as opposed to str.strip() which also eats \x1c-\x1f
ASCII_WHITESPACE = " \t\n\r\x0b\x0c"


class SystemCnf(Mapping[str, str]):
    """Read-only key/value view of a parsed SYSTEM.CNF."""

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})

    @classmethod
    def from_bytes(cls, data: bytes) -> "SystemCnf":
        """Decode raw entry bytes and parse them.

        Raises:
            NotAsciiError: If the bytes are not valid ASCII
        """
        try:
            text = data.decode("ascii")
        except UnicodeDecodeError as e:
            raise NotAsciiError(e.start) from e
        return cls.parse(text)

    @classmethod
    def parse(cls, text: str) -> "SystemCnf":
        """Parse SYSTEM.CNF text.

        Each line is split on its first ``=``. The key loses its trailing
        whitespace and the value its leading whitespace; trailing whitespace
        on the value is kept. Lines without ``=`` are ignored and a repeated
        key replaces the earlier value.
        """
        entries: dict[str, str] = {}

        for line in text.split("\n"):
            if line.endswith("\r"):
                line = line[:-1]

            index = line.find("=")
            if index < 0:
                continue

            key = line[:index].rstrip(ASCII_WHITESPACE)
            value = line[index + 1:].lstrip(ASCII_WHITESPACE)
            entries[key] = value

        return cls(entries)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SystemCnf({self._entries!r})"


class TitleIdResolver:
    """Derives the canonical title ID from a SYSTEM.CNF boot path."""

    def __init__(self, key: str = BOOT2_KEY, pattern: str = TITLE_ID_PATTERN) -> None:
        self.key = key
        self._pattern = re.compile(pattern)

    def resolve(self, system_cnf: Mapping[str, str]) -> str:
        """Return the title ID named by the boot path.

        Raises:
            NoTitleIdError: If the key is missing or its value does not match
        """
        boot_path = system_cnf.get(self.key)
        if boot_path is None:
            log.debug("Boot key missing from SYSTEM.CNF", key=self.key)
            raise NoTitleIdError()

        match = self._pattern.fullmatch(boot_path.strip(ASCII_WHITESPACE))
        if match is None:
            log.debug("Boot path did not match title ID pattern", key=self.key, boot_path=boot_path)
            raise NoTitleIdError()

        return match.group("title_id")
