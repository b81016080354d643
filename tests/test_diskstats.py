import pytest

from kprocfs.core import InternalError, NotFoundError
from kprocfs.diskstats import DiskStat, DiskStats

OLD = "   8       0 sda 11 12 13 14 15 16 17 18 19 20 21"
K418 = "   8       1 sda1 11 12 13 14 15 16 17 18 19 20 21 22 23 24 25"
K55 = " 259       0 nvme0n1 11 12 13 14 15 16 17 18 19 20 21 22 23 24 25 26 27"


def test_basic_fields():
    stat = DiskStat.from_line(OLD)
    assert (stat.major, stat.minor, stat.name) == (8, 0, "sda")
    assert stat.reads == 11
    assert stat.weighted_time_in_progress == 21
    assert stat.discards is None
    assert stat.time_flushing is None


def test_discard_fields():
    stat = DiskStat.from_line(K418)
    assert stat.discards == 22
    assert stat.time_discarding == 25
    assert stat.flushes is None


def test_flush_fields():
    stat = DiskStat.from_line(K55)
    assert stat.name == "nvme0n1"
    assert stat.flushes == 26
    assert stat.time_flushing == 27


def test_unparsable_optional_is_none():
    stat = DiskStat.from_line(OLD + " x 23")
    assert stat.discards is None
    assert stat.discards_merged == 23


def test_missing_required_field():
    with pytest.raises(InternalError):
        DiskStat.from_line("8 0 sda 1 2 3")


def test_bad_required_number():
    with pytest.raises(InternalError):
        DiskStat.from_line("8 0 sda 1 2 3 4 5 6 7 8 9 10 -1")


def test_parse_many():
    stats = DiskStats.parse("\n".join([OLD, K418, K55]) + "\n")
    assert [s.name for s in stats] == ["sda", "sda1", "nvme0n1"]


def test_from_file(tmp_path):
    path = tmp_path / "diskstats"
    path.write_text(OLD + "\n")
    assert [s.reads for s in DiskStats.from_file(path)] == [11]
    with pytest.raises(NotFoundError):
        DiskStats.from_file(tmp_path / "missing")