"""Parsing of the device major numbers in /proc/devices."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from kprocfs.core import Source, expect, parse_int, read_file, split_lines


@dataclass
class CharDeviceEntry:
    """A character device major number and name."""

    major: int
    name: str


@dataclass
class BlockDeviceEntry:
    """A block device major number and name."""

    major: int
    name: str


@dataclass
class Devices:
    """Character and block devices; block devices may be empty."""

    char_devices: list[CharDeviceEntry] = field(default_factory=list)
    block_devices: list[BlockDeviceEntry] = field(default_factory=list)

    @classmethod
    def parse(cls, source: Source) -> "Devices":
        devices = cls()
        in_block = False
        for line in split_lines(source):
            if not line:
                continue
            if line.startswith("Character devices:"):
                in_block = False
                continue
            if line.startswith("Block devices:"):
                in_block = True
                continue
            fields = iter(line.split())
            major_text = expect(next(fields, None))
            if in_block:
                major = parse_int(major_text, signed=True, bits=32)
                devices.block_devices.append(BlockDeviceEntry(major, expect(next(fields, None))))
            else:
                major = parse_int(major_text, bits=32)
                devices.char_devices.append(CharDeviceEntry(major, expect(next(fields, None))))
        return devices

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "Devices":
        return read_file(path, cls.parse)