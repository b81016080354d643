import pytest

from kprocfs.core import InternalError, NotFoundError
from kprocfs.meminfo import Meminfo, convert_to_kibibytes

REQUIRED_KEYS = [
    "MemTotal",
    "MemFree",
    "Buffers",
    "Cached",
    "SwapCached",
    "Active",
    "Inactive",
    "SwapTotal",
    "SwapFree",
    "Dirty",
    "Writeback",
    "Mapped",
    "Slab",
    "Committed_AS",
    "VmallocTotal",
    "VmallocUsed",
    "VmallocChunk",
]


def _sample(skip=(), extra=""):
    lines = [
        f"{key}:{' ' * 8}{index + 1} kB"
        for index, key in enumerate(REQUIRED_KEYS)
        if key not in skip
    ]
    return "\n".join(lines) + "\n" + extra


def test_convert_units():
    assert convert_to_kibibytes(5, "B") == 5
    assert convert_to_kibibytes(3, "kB") == 3 * 1024
    assert convert_to_kibibytes(2, "MiB") == 2 * 1024 * 1024
    assert convert_to_kibibytes(1, "GB") == 1024 * 1024 * 1024


def test_convert_unknown_unit():
    with pytest.raises(InternalError):
        convert_to_kibibytes(1, "TB")


def test_parse_required_fields_in_bytes():
    info = Meminfo.parse(_sample())
    assert info.mem_total == 1 * 1024
    assert info.mem_free == 2 * 1024
    assert info.vmalloc_chunk == len(REQUIRED_KEYS) * 1024
    assert info.mem_available is None
    assert info.direct_map_4M is None


def test_parse_optional_and_unitless():
    extra = "MemAvailable:    7 kB\nHugePages_Total:       4\nActive(anon):  9 kB\n\n"
    info = Meminfo.parse(_sample(extra=extra))
    assert info.mem_available == 7 * 1024
    assert info.hugepages_total == 4
    assert info.active_anon == 9 * 1024


def test_parse_bytes_input():
    info = Meminfo.parse(_sample().encode())
    assert info.swap_total == Meminfo.parse(_sample()).swap_total


def test_missing_required_field():
    with pytest.raises(InternalError):
        Meminfo.parse(_sample(skip={"MemTotal"}))


def test_bad_unit():
    with pytest.raises(InternalError):
        Meminfo.parse(_sample(extra="Shmem: 3 parsecs\n"))


def test_missing_value():
    with pytest.raises(InternalError):
        Meminfo.parse(_sample(extra="Shmem:\n"))


def test_bad_number():
    with pytest.raises(InternalError):
        Meminfo.parse(_sample(extra="Shmem: lots kB\n"))


def test_from_file(tmp_path):
    path = tmp_path / "meminfo"
    path.write_text(_sample())
    assert Meminfo.from_file(path) == Meminfo.parse(_sample())


def test_from_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        Meminfo.from_file(tmp_path / "absent")