# kprocfs

Parsers for the files the Linux kernel exposes under `/proc`. The `parse`
methods take the file's contents as `str` or `bytes`, or an open file object,
so captured data can be parsed on any platform. Each type also has a
`from_file` class method that opens a path and parses it.

## Installation

```
pip install kprocfs
```

## Usage

```python
from kprocfs.meminfo import Meminfo
from kprocfs.kernel import LoadAverage, KernelStats
from kprocfs.core import ExplicitSystemInfo

meminfo = Meminfo.from_file("/proc/meminfo")
print(meminfo.mem_total, meminfo.mem_available)  # sizes in bytes

load = LoadAverage.parse("2.63 1.00 1.42 3/4280 2496732")
print(load.one, load.cur, load.max)

info = ExplicitSystemInfo(
    boot_time_secs=1692972606,
    ticks_per_second=100,
    page_size=4096,
    is_little_endian=True,
)
stats = KernelStats.from_file("/proc/stat", info)
print(stats.total.user_ms())
```

Modules:

- `kprocfs.core` — error types, `SystemInfo` / `ExplicitSystemInfo`, and
  parsing helpers such as `parse_int`, `split_lines` and `read_file`
- `kprocfs.kernel` — `LoadAverage`, `KernelConfig`, `KernelStats` (with
  `CpuTime`), `VmStat`, `KernelModules`, `KernelCmdline`
- `kprocfs.meminfo` — `Meminfo` for `/proc/meminfo`
- `kprocfs.cpuinfo` — `CpuInfo` for `/proc/cpuinfo`
- `kprocfs.crypto` — `CryptoTable` for `/proc/crypto`
- `kprocfs.devices` — `Devices` for `/proc/devices`
- `kprocfs.diskstats` — `DiskStats` for `/proc/diskstats`
- `kprocfs.iomem` — `Iomem` for `/proc/iomem`; `PhysicalMemoryMap.get_range`
  turns an address range into page frame numbers using a `SystemInfo`
- `kprocfs.keyring` — `Keys` and `KeyUsers` for `/proc/keys` and `/proc/key-users`
- `kprocfs.kpageflags` — `PhysicalPageFlags.parse_info` for `/proc/kpageflags` entries
- `kprocfs.mounts` — `parse_mounts` and `read_mounts` for `/proc/mounts`
- `kprocfs.cgroups` — `CGroupControllers` for `/proc/cgroups` and
  `ProcessCGroups` for `/proc/<pid>/cgroup`

## Errors

Parsing and reading failures raise subclasses of `kprocfs.core.ProcError`:
`PermissionDeniedError`, `NotFoundError`, `IncompleteError`, `ProcIOError`,
`OtherError` and `InternalError` (malformed or unexpected data). Errors raised
by `from_file` carry the file's path in their `path` attribute where the kind
of error allows it.

## What it does not do

The package parses only the files listed above. It has no parser for the file
lock table in `/proc/locks`, and apart from a process's cgroup file it does
not read per-process files under `/proc/<pid>/`. It has no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```