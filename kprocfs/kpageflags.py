"""Flags of physical memory pages, as found in /proc/kpageflags."""

from __future__ import annotations

import enum
from functools import reduce
from operator import or_


class PhysicalPageFlags(enum.IntFlag):
    """Flags describing the state of one physical page frame."""

    LOCKED = 1 << 0
    ERROR = 1 << 1
    REFERENCED = 1 << 2
    UPTODATE = 1 << 3
    DIRTY = 1 << 4
    LRU = 1 << 5
    ACTIVE = 1 << 6
    SLAB = 1 << 7
    WRITEBACK = 1 << 8
    RECLAIM = 1 << 9
    BUDDY = 1 << 10
    MMAP = 1 << 11
    ANON = 1 << 12
    SWAPCACHE = 1 << 13
    SWAPBACKED = 1 << 14
    COMPOUND_HEAD = 1 << 15
    COMPOUND_TAIL = 1 << 16
    HUGE = 1 << 17
    UNEVICTABLE = 1 << 18
    HWPOISON = 1 << 19
    NOPAGE = 1 << 20
    KSM = 1 << 21
    THP = 1 << 22
    OFFLINE = 1 << 23
    ZERO_PAGE = 1 << 24
    IDLE = 1 << 25
    PGTABLE = 1 << 26

    @classmethod
    def parse_info(cls, info: int) -> "PhysicalPageFlags":
        """Decode a 64-bit entry, dropping bits that have no known flag."""
        known = reduce(or_, (int(member) for member in cls), 0)
        return cls(info & known)