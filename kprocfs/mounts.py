"""Parsing of mount tables such as /proc/mounts."""

from __future__ import annotations

import os
from dataclasses import dataclass

from kprocfs.core import Source, expect, parse_int, read_file, split_lines

_ESCAPES = (("\\011", "\t"), ("\\012", "\n"), ("\\134", "\\"), ("\\043", "#"))


@dataclass
class MountEntry:
    """One mounted filesystem."""

    fs_spec: str
    fs_file: str
    fs_vfstype: str
    fs_mntops: dict[str, str | None]
    fs_freq: int
    fs_passno: int


def unmangle_octal(text: str) -> str:
    """Decode the octal escapes the kernel uses for tab, newline, backslash and hash."""
    for octal, char in _ESCAPES:
        text = text.replace(octal, char)
    return text


def _parse_options(text: str) -> dict[str, str | None]:
    options: dict[str, str | None] = {}
    for option in text.split(","):
        key, sep, value = option.partition("=")
        options[key] = value if sep else None
    return options


def parse_mounts(source: Source) -> list[MountEntry]:
    """Parse a mount table, one entry per line."""
    entries = []
    for line in split_lines(source):
        fields = iter(line.split())
        fs_spec = unmangle_octal(expect(next(fields, None)))
        fs_file = unmangle_octal(expect(next(fields, None)))
        fs_vfstype = unmangle_octal(expect(next(fields, None)))
        fs_mntops = _parse_options(unmangle_octal(expect(next(fields, None))))
        fs_freq = parse_int(expect(next(fields, None)), bits=8)
        fs_passno = parse_int(expect(next(fields, None)), bits=8)
        entries.append(MountEntry(fs_spec, fs_file, fs_vfstype, fs_mntops, fs_freq, fs_passno))
    return entries


def read_mounts(path: os.PathLike | str) -> list[MountEntry]:
    """Read and parse a mount table file."""
    return read_file(path, parse_mounts)