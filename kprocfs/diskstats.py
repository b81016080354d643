"""Parsing of disk I/O statistics in /proc/diskstats."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterator

from kprocfs.core import InternalError, Source, expect, parse_int, read_file, split_lines


def _optional(tokens: Iterator[str]) -> int | None:
    token = next(tokens, None)
    if token is None:
        return None
    try:
        return parse_int(token)
    except InternalError:
        return None


@dataclass
class DiskStat:
    """I/O counters of one block device; times are in milliseconds."""

    major: int
    minor: int
    name: str
    reads: int
    merged: int
    sectors_read: int
    time_reading: int
    writes: int
    writes_merged: int
    sectors_written: int
    time_writing: int
    in_progress: int
    time_in_progress: int
    weighted_time_in_progress: int
    discards: int | None = None
    discards_merged: int | None = None
    sectors_discarded: int | None = None
    time_discarding: int | None = None
    flushes: int | None = None
    time_flushing: int | None = None

    @classmethod
    def from_line(cls, line: str) -> "DiskStat":
        tokens = iter(line.split())
        major = parse_int(expect(next(tokens, None)), signed=True, bits=32)
        minor = parse_int(expect(next(tokens, None)), signed=True, bits=32)
        name = expect(next(tokens, None))
        counters = [parse_int(expect(next(tokens, None))) for _ in range(11)]
        extra = [_optional(tokens) for _ in range(6)]
        return cls(major, minor, name, *counters, *extra)


@dataclass
class DiskStats:
    """Statistics of every block device, in file order."""

    stats: list[DiskStat] = field(default_factory=list)

    @classmethod
    def parse(cls, source: Source) -> "DiskStats":
        return cls([DiskStat.from_line(line) for line in split_lines(source)])

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "DiskStats":
        return read_file(path, cls.parse)

    def __iter__(self) -> Iterator[DiskStat]:
        return iter(self.stats)