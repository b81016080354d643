"""Parsers for the Linux /proc filesystem."""

__version__ = "0.17.0"

__all__ = [
    "cgroups",
    "core",
    "cpuinfo",
    "crypto",
    "devices",
    "diskstats",
    "iomem",
    "kernel",
    "keyring",
    "kpageflags",
    "meminfo",
    "mounts",
]