"""Parsing of the physical memory map in /proc/iomem."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterator

from kprocfs.core import SystemInfo, expect, read_file, split_into_num, split_lines


@dataclass(frozen=True)
class PhysicalMemoryMap:
    """One region of the physical address space."""

    address: tuple[int, int]
    name: str

    @classmethod
    def from_line(cls, line: str) -> tuple[int, "PhysicalMemoryMap"]:
        """Parse one line, returning its nesting depth and the region."""
        indent = (len(line) - len(line.lstrip(" "))) // 2
        parts = line.strip().split(" : ")
        address = expect(parts[0] if parts else None)
        name = expect(parts[1] if len(parts) > 1 else None)
        return indent, cls(address=split_into_num(address, "-", 16), name=name)

    def get_range(self, system_info: SystemInfo) -> tuple[int, int]:
        """Page frame numbers covered: start included, end excluded."""
        page_size = system_info.page_size()
        start = self.address[0] // page_size
        end = (self.address[1] + 1) // page_size
        return start, end


@dataclass
class Iomem:
    """All regions of /proc/iomem with their nesting depth."""

    entries: list[tuple[int, PhysicalMemoryMap]] = field(default_factory=list)

    @classmethod
    def parse(cls, source) -> "Iomem":
        return cls([PhysicalMemoryMap.from_line(line) for line in split_lines(source)])

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "Iomem":
        return read_file(path, cls.parse)

    def __iter__(self) -> Iterator[tuple[int, PhysicalMemoryMap]]:
        return iter(self.entries)