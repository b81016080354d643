"""Parsing of processor information in /proc/cpuinfo."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from kprocfs.core import InternalError, Source, parse_int, read_file, split_lines


def _cpu_blocks(lines: list[str]) -> list[dict[str, str]]:
    blocks: list[dict[str, str]] = []
    current: dict[str, str] | None = {}
    # The first line of a cpu block must start with "processor".
    found_first = False
    for line in lines:
        if line:
            parts = line.split(":")
            key = parts[0]
            if not found_first and key.strip() == "processor":
                found_first = True
            if not found_first:
                continue
            if len(parts) > 1:
                if current is None:
                    current = {}
                current[key.strip()] = parts[1].strip()
        elif current is not None:
            blocks.append(current)
            current = None
            found_first = False
    if current is not None:
        blocks.append(current)
    return blocks


@dataclass
class CpuInfo:
    """Data from /proc/cpuinfo: fields shared by every CPU, and per-CPU fields."""

    fields: dict[str, str] = field(default_factory=dict)
    cpus: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def parse(cls, source: Source) -> "CpuInfo":
        blocks = _cpu_blocks(split_lines(source))
        if not blocks:
            raise InternalError("Internal Unwrap Error: no cpu blocks found")

        first = blocks[0]
        common = {
            key: value
            for key, value in first.items()
            if all(block.get(key) == value for block in blocks)
        }
        cpus = [
            {key: value for key, value in block.items() if key not in common}
            for block in blocks
        ]
        return cls(fields=common, cpus=cpus)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "CpuInfo":
        return read_file(path, cls.parse)

    def _cpu(self, cpu_num: int) -> dict[str, str] | None:
        if 0 <= cpu_num < len(self.cpus):
            return self.cpus[cpu_num]
        return None

    def num_cores(self) -> int:
        """Number of CPU entries in the file."""
        return len(self.cpus)

    def get_info(self, cpu_num: int) -> dict[str, str] | None:
        """Common fields merged with the fields of one CPU, or None if there is no such CPU."""
        cpu = self._cpu(cpu_num)
        if cpu is None:
            return None
        return {**self.fields, **cpu}

    def get_field(self, cpu_num: int, field_name: str) -> str | None:
        """A field of one CPU, falling back to the common fields."""
        cpu = self._cpu(cpu_num)
        if cpu is None:
            return None
        if field_name in cpu:
            return cpu[field_name]
        return self.fields.get(field_name)

    def model_name(self, cpu_num: int) -> str | None:
        return self.get_field(cpu_num, "model name")

    def vendor_id(self, cpu_num: int) -> str | None:
        return self.get_field(cpu_num, "vendor_id")

    def physical_id(self, cpu_num: int) -> int | None:
        """The physical package id; absent on some older kernels."""
        value = self.get_field(cpu_num, "physical id")
        if value is None:
            return None
        try:
            return parse_int(value, bits=32)
        except InternalError:
            return None

    def flags(self, cpu_num: int) -> list[str] | None:
        value = self.get_field(cpu_num, "flags")
        return None if value is None else value.split()