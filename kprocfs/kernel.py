"""Kernel-wide statistics: load average, config, /proc/stat, vmstat, modules, cmdline."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from datetime import timedelta

from kprocfs.core import (
    InternalError,
    ProcIOError,
    Source,
    SystemInfo,
    expect,
    parse_int,
    read_file,
    split_lines,
)


def _read_text(source: Source) -> str:
    if isinstance(source, str):
        return source
    data = bytes(source) if isinstance(source, (bytes, bytearray)) else source.read()
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProcIOError(exc) from exc


def _parse_float(text: str) -> float:
    if "_" in text or text != text.strip():
        raise InternalError(f"Internal Unwrap Error: invalid float literal {text!r}")
    try:
        return float(text)
    except ValueError as exc:
        raise InternalError(f"Internal Unwrap Error: invalid float literal {text!r}") from exc


@dataclass
class LoadAverage:
    """Load averages and scheduling entity counts from /proc/loadavg."""

    one: float
    five: float
    fifteen: float
    cur: int
    max: int
    latest_pid: int

    @classmethod
    def parse(cls, source: Source) -> "LoadAverage":
        fields = iter(_read_text(source).split())
        one = _parse_float(expect(next(fields, None)))
        five = _parse_float(expect(next(fields, None)))
        fifteen = _parse_float(expect(next(fields, None)))
        curmax = expect(next(fields, None))
        latest_pid = parse_int(expect(next(fields, None)), bits=32)

        parts = iter(curmax.split("/"))
        cur = parse_int(expect(next(parts, None)), bits=32)
        maximum = parse_int(expect(next(parts, None)), bits=32)
        return cls(one, five, fifteen, cur, maximum, latest_pid)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "LoadAverage":
        return read_file(path, cls.parse)


class ConfigKind(enum.Enum):
    """The kind of value a kernel config option holds."""

    YES = "y"
    MODULE = "m"
    VALUE = "value"


@dataclass(frozen=True)
class ConfigSetting:
    """A kernel config option's value: built in, a module, or a literal value."""

    kind: ConfigKind
    value: str | None = None

    @classmethod
    def from_str(cls, text: str) -> "ConfigSetting":
        if text == "y":
            return cls(ConfigKind.YES)
        if text == "m":
            return cls(ConfigKind.MODULE)
        return cls(ConfigKind.VALUE, text)


@dataclass
class KernelConfig:
    """The kernel configuration, option name to setting."""

    settings: dict[str, ConfigSetting] = field(default_factory=dict)

    @classmethod
    def parse(cls, source: Source) -> "KernelConfig":
        settings: dict[str, ConfigSetting] = {}
        for line in split_lines(source):
            if line.startswith("#") or "=" not in line:
                continue
            name, _, value = line.partition("=")
            settings[name] = ConfigSetting.from_str(value)
        return cls(settings)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "KernelConfig":
        return read_file(path, cls.parse)


def _scaled(ticks: int | None, tps: int) -> int | None:
    if ticks is None:
        return None
    return ticks * (1000 // tps)


def _as_duration(ms: int | None) -> timedelta | None:
    return None if ms is None else timedelta(milliseconds=ms)


@dataclass
class CpuTime:
    """Ticks a CPU (or all CPUs) spent in each state."""

    user: int
    nice: int
    system: int
    idle: int
    tps: int = field(repr=False)
    iowait: int | None = None
    irq: int | None = None
    softirq: int | None = None
    steal: int | None = None
    guest: int | None = None
    guest_nice: int | None = None

    @classmethod
    def from_line(cls, line: str, ticks_per_second: int) -> "CpuTime":
        fields = iter(line.split())
        next(fields, None)
        user = parse_int(expect(next(fields, None)))
        nice = parse_int(expect(next(fields, None)))
        system = parse_int(expect(next(fields, None)))
        idle = parse_int(expect(next(fields, None)))
        optional = [parse_int(token) for token in list(fields)[:6]]
        optional += [None] * (6 - len(optional))
        iowait, irq, softirq, steal, guest, guest_nice = optional
        return cls(
            user=user,
            nice=nice,
            system=system,
            idle=idle,
            tps=ticks_per_second,
            iowait=iowait,
            irq=irq,
            softirq=softirq,
            steal=steal,
            guest=guest,
            guest_nice=guest_nice,
        )

    def user_ms(self) -> int:
        return _scaled(self.user, self.tps)

    def user_duration(self) -> timedelta:
        return timedelta(milliseconds=self.user_ms())

    def nice_ms(self) -> int:
        return _scaled(self.nice, self.tps)

    def nice_duration(self) -> timedelta:
        return timedelta(milliseconds=self.nice_ms())

    def system_ms(self) -> int:
        return _scaled(self.system, self.tps)

    def system_duration(self) -> timedelta:
        return timedelta(milliseconds=self.system_ms())

    def idle_ms(self) -> int:
        return _scaled(self.idle, self.tps)

    def idle_duration(self) -> timedelta:
        return timedelta(milliseconds=self.idle_ms())

    def iowait_ms(self) -> int | None:
        return _scaled(self.iowait, self.tps)

    def iowait_duration(self) -> timedelta | None:
        return _as_duration(self.iowait_ms())

    def irq_ms(self) -> int | None:
        return _scaled(self.irq, self.tps)

    def irq_duration(self) -> timedelta | None:
        return _as_duration(self.irq_ms())

    def softirq_ms(self) -> int | None:
        return _scaled(self.softirq, self.tps)

    def softirq_duration(self) -> timedelta | None:
        return _as_duration(self.softirq_ms())

    def steal_ms(self) -> int | None:
        return _scaled(self.steal, self.tps)

    def steal_duration(self) -> timedelta | None:
        return _as_duration(self.steal_ms())

    def guest_ms(self) -> int | None:
        return _scaled(self.guest, self.tps)

    def guest_duration(self) -> timedelta | None:
        return _as_duration(self.guest_ms())

    def guest_nice_ms(self) -> int | None:
        return _scaled(self.guest_nice, self.tps)

    def guest_nice_duration(self) -> timedelta | None:
        return _as_duration(self.guest_nice_ms())


@dataclass
class KernelStats:
    """System statistics from /proc/stat."""

    total: CpuTime
    cpu_time: list[CpuTime]
    ctxt: int
    btime: int
    processes: int
    procs_running: int | None = None
    procs_blocked: int | None = None

    @classmethod
    def parse(cls, source: Source, system_info: SystemInfo) -> "KernelStats":
        tps = system_info.ticks_per_second()
        total = None
        cpus: list[CpuTime] = []
        counters: dict[str, int] = {}
        widths = {
            "ctxt ": 64,
            "btime ": 64,
            "processes ": 64,
            "procs_running ": 32,
            "procs_blocked ": 32,
        }
        for line in split_lines(source):
            if line.startswith("cpu "):
                total = CpuTime.from_line(line, tps)
            elif line.startswith("cpu"):
                cpus.append(CpuTime.from_line(line, tps))
            else:
                for prefix, bits in widths.items():
                    if line.startswith(prefix):
                        counters[prefix.strip()] = parse_int(line[len(prefix):], bits=bits)
                        break
        return cls(
            total=expect(total),
            cpu_time=cpus,
            ctxt=expect(counters.get("ctxt")),
            btime=expect(counters.get("btime")),
            processes=expect(counters.get("processes")),
            procs_running=counters.get("procs_running"),
            procs_blocked=counters.get("procs_blocked"),
        )

    @classmethod
    def from_file(cls, path: os.PathLike | str, system_info: SystemInfo) -> "KernelStats":
        return read_file(path, lambda handle: cls.parse(handle, system_info))


@dataclass
class VmStat:
    """Virtual memory statistics, name to value."""

    values: dict[str, int] = field(default_factory=dict)

    @classmethod
    def parse(cls, source: Source) -> "VmStat":
        values: dict[str, int] = {}
        for line in split_lines(source):
            fields = iter(line.split())
            name = expect(next(fields, None))
            values[name] = parse_int(expect(next(fields, None)), signed=True, bits=64)
        return cls(values)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "VmStat":
        return read_file(path, cls.parse)


@dataclass
class KernelModule:
    """A loaded kernel module."""

    name: str
    size: int
    refcount: int
    used_by: list[str]
    state: str


@dataclass
class KernelModules:
    """Loaded kernel modules keyed by name, from /proc/modules."""

    modules: dict[str, KernelModule] = field(default_factory=dict)

    @classmethod
    def parse(cls, source: Source) -> "KernelModules":
        modules: dict[str, KernelModule] = {}
        for line in split_lines(source):
            fields = iter(line.split())
            name = expect(next(fields, None))
            size = parse_int(expect(next(fields, None)), bits=32)
            refcount = parse_int(expect(next(fields, None)), signed=True, bits=32)
            used_by = expect(next(fields, None))
            state = expect(next(fields, None))
            users = [] if used_by == "-" else [user for user in used_by.split(",") if user]
            modules[name] = KernelModule(name, size, refcount, users, state)
        return cls(modules)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "KernelModules":
        return read_file(path, cls.parse)


@dataclass
class KernelCmdline:
    """Arguments passed to the kernel at boot, from /proc/cmdline."""

    args: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, source: Source) -> "KernelCmdline":
        return cls([arg for arg in _read_text(source).split(" ") if arg])

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "KernelCmdline":
        return read_file(path, cls.parse)