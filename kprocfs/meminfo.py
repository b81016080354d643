"""Parsing of system memory usage statistics in /proc/meminfo."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

from kprocfs.core import InternalError, Source, expect, parse_int, read_file, split_lines

_UNIT_FACTORS = {
    "B": 1,
    "KiB": 1024,
    "kiB": 1024,
    "kB": 1024,
    "KB": 1024,
    "MiB": 1024 * 1024,
    "miB": 1024 * 1024,
    "MB": 1024 * 1024,
    "mB": 1024 * 1024,
    "GiB": 1024 * 1024 * 1024,
    "giB": 1024 * 1024 * 1024,
    "GB": 1024 * 1024 * 1024,
    "gB": 1024 * 1024 * 1024,
}


def convert_to_kibibytes(num: int, unit: str) -> int:
    """Scale num by its unit to bytes; "kB" in procfs means kibibytes."""
    factor = _UNIT_FACTORS.get(unit)
    if factor is None:
        raise InternalError(f"Internal Unwrap Error: Unknown unit type {unit}")
    return num * factor


# Attribute name -> key in /proc/meminfo. Required entries come first.
_REQUIRED = {
    "mem_total": "MemTotal",
    "mem_free": "MemFree",
    "buffers": "Buffers",
    "cached": "Cached",
    "swap_cached": "SwapCached",
    "active": "Active",
    "inactive": "Inactive",
    "swap_total": "SwapTotal",
    "swap_free": "SwapFree",
    "dirty": "Dirty",
    "writeback": "Writeback",
    "mapped": "Mapped",
    "slab": "Slab",
    "committed_as": "Committed_AS",
    "vmalloc_total": "VmallocTotal",
    "vmalloc_used": "VmallocUsed",
    "vmalloc_chunk": "VmallocChunk",
}

_OPTIONAL = {
    "mem_available": "MemAvailable",
    "active_anon": "Active(anon)",
    "inactive_anon": "Inactive(anon)",
    "active_file": "Active(file)",
    "inactive_file": "Inactive(file)",
    "unevictable": "Unevictable",
    "mlocked": "Mlocked",
    "high_total": "HighTotal",
    "high_free": "HighFree",
    "low_total": "LowTotal",
    "low_free": "LowFree",
    "mmap_copy": "MmapCopy",
    "anon_pages": "AnonPages",
    "shmem": "Shmem",
    "s_reclaimable": "SReclaimable",
    "s_unreclaim": "SUnreclaim",
    "kernel_stack": "KernelStack",
    "page_tables": "PageTables",
    "secondary_page_tables": "SecPageTables",
    "quicklists": "Quicklists",
    "nfs_unstable": "NFS_Unstable",
    "bounce": "Bounce",
    "writeback_tmp": "WritebackTmp",
    "commit_limit": "CommitLimit",
    "hardware_corrupted": "HardwareCorrupted",
    "anon_hugepages": "AnonHugePages",
    "shmem_hugepages": "ShmemHugePages",
    "shmem_pmd_mapped": "ShmemPmdMapped",
    "cma_total": "CmaTotal",
    "cma_free": "CmaFree",
    "hugepages_total": "HugePages_Total",
    "hugepages_free": "HugePages_Free",
    "hugepages_rsvd": "HugePages_Rsvd",
    "hugepages_surp": "HugePages_Surp",
    "hugepagesize": "Hugepagesize",
    "direct_map_4k": "DirectMap4k",
    "direct_map_4M": "DirectMap4M",
    "direct_map_2M": "DirectMap2M",
    "direct_map_1G": "DirectMap1G",
    "hugetlb": "Hugetlb",
    "per_cpu": "Percpu",
    "k_reclaimable": "KReclaimable",
    "file_pmd_mapped": "FilePmdMapped",
    "file_huge_pages": "FileHugePages",
    "z_swap": "Zswap",
    "z_swapped": "Zswapped",
}


@dataclass
class Meminfo:
    """Memory usage statistics; sizes in bytes, unitless counts unchanged."""

    mem_total: int
    mem_free: int
    buffers: int
    cached: int
    swap_cached: int
    active: int
    inactive: int
    swap_total: int
    swap_free: int
    dirty: int
    writeback: int
    mapped: int
    slab: int
    committed_as: int
    vmalloc_total: int
    vmalloc_used: int
    vmalloc_chunk: int
    mem_available: int | None = None
    active_anon: int | None = None
    inactive_anon: int | None = None
    active_file: int | None = None
    inactive_file: int | None = None
    unevictable: int | None = None
    mlocked: int | None = None
    high_total: int | None = None
    high_free: int | None = None
    low_total: int | None = None
    low_free: int | None = None
    mmap_copy: int | None = None
    anon_pages: int | None = None
    shmem: int | None = None
    s_reclaimable: int | None = None
    s_unreclaim: int | None = None
    kernel_stack: int | None = None
    page_tables: int | None = None
    secondary_page_tables: int | None = None
    quicklists: int | None = None
    nfs_unstable: int | None = None
    bounce: int | None = None
    writeback_tmp: int | None = None
    commit_limit: int | None = None
    hardware_corrupted: int | None = None
    anon_hugepages: int | None = None
    shmem_hugepages: int | None = None
    shmem_pmd_mapped: int | None = None
    cma_total: int | None = None
    cma_free: int | None = None
    hugepages_total: int | None = None
    hugepages_free: int | None = None
    hugepages_rsvd: int | None = None
    hugepages_surp: int | None = None
    hugepagesize: int | None = None
    direct_map_4k: int | None = None
    direct_map_4M: int | None = None
    direct_map_2M: int | None = None
    direct_map_1G: int | None = None
    hugetlb: int | None = None
    per_cpu: int | None = None
    k_reclaimable: int | None = None
    file_pmd_mapped: int | None = None
    file_huge_pages: int | None = None
    z_swap: int | None = None
    z_swapped: int | None = None

    @classmethod
    def parse(cls, source: Source) -> "Meminfo":
        values: dict[str, int] = {}
        for line in split_lines(source):
            if not line:
                continue
            tokens = iter(line.split())
            name = expect(next(tokens, None), "no field")
            raw = expect(next(tokens, None), "no value")
            unit = next(tokens, None)
            value = parse_int(raw)
            if unit is not None:
                value = convert_to_kibibytes(value, unit)
            values[name[:-1]] = value

        kwargs = {attr: expect(values.get(key)) for attr, key in _REQUIRED.items()}
        kwargs.update({attr: values.get(key) for attr, key in _OPTIONAL.items()})
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "Meminfo":
        return read_file(path, cls.parse)


assert {f.name for f in fields(Meminfo)} == set(_REQUIRED) | set(_OPTIONAL)