"""Control group information from /proc/cgroups and /proc/<pid>/cgroup."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterator

from kprocfs.core import Source, expect, parse_int, read_file, split_lines


@dataclass
class CGroupController:
    """A cgroup controller and the hierarchy it is mounted on."""

    name: str
    hierarchy: int
    num_cgroups: int
    enabled: bool


@dataclass
class CGroupControllers:
    """All controllers listed in /proc/cgroups."""

    controllers: list[CGroupController] = field(default_factory=list)

    @classmethod
    def parse(cls, source: Source) -> "CGroupControllers":
        controllers = []
        for line in split_lines(source):
            if line.startswith("#"):
                continue
            tokens = iter(line.split())
            name = expect(next(tokens, None), "name")
            hierarchy = parse_int(expect(next(tokens, None), "hierarchy"), bits=32)
            num_cgroups = parse_int(expect(next(tokens, None), "num_cgroups"), bits=32)
            enabled = expect(next(tokens, None), "enabled") == "1"
            controllers.append(CGroupController(name, hierarchy, num_cgroups, enabled))
        return cls(controllers)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "CGroupControllers":
        return read_file(path, cls.parse)

    def __iter__(self) -> Iterator[CGroupController]:
        return iter(self.controllers)

    def __len__(self) -> int:
        return len(self.controllers)


@dataclass
class ProcessCGroup:
    """Membership of a process in one cgroup hierarchy."""

    hierarchy: int
    controllers: list[str]
    pathname: str


@dataclass
class ProcessCGroups:
    """All cgroup memberships of a process."""

    cgroups: list[ProcessCGroup] = field(default_factory=list)

    @classmethod
    def parse(cls, source: Source) -> "ProcessCGroups":
        cgroups = []
        for line in split_lines(source):
            if line.startswith("#"):
                continue
            parts = iter(line.split(":", 2))
            hierarchy = parse_int(expect(next(parts, None), "hierarchy"), bits=32)
            controllers_text = expect(next(parts, None), "controllers")
            controllers = [name for name in controllers_text.split(",") if name]
            pathname = expect(next(parts, None), "path")
            cgroups.append(ProcessCGroup(hierarchy, controllers, pathname))
        return cls(cgroups)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "ProcessCGroups":
        return read_file(path, cls.parse)

    def __iter__(self) -> Iterator[ProcessCGroup]:
        return iter(self.cgroups)

    def __len__(self) -> int:
        return len(self.cgroups)