import pytest

from kprocfs.core import InternalError, NotFoundError
from kprocfs.mounts import parse_mounts, read_mounts, unmangle_octal

MOUNTS = (
    "proc /proc proc rw,nosuid,nodev,noexec,relatime 0 0\n"
    "sysfs /sys sysfs rw,nosuid,nodev,noexec,relatime 0 0\n"
    "/dev/mapper/ol-root / xfs rw,relatime,attr2,inode64,logbufs=8,logbsize=32k,noquota 0 0\n"
    "Downloads /media/sf_downloads vboxsf rw,nodev,relatime,iocharset=utf8,uid=0,gid=977,"
    "dmode=0770,fmode=0770,tag=VBoxAutomounter 0 0"
)


@pytest.mark.parametrize(
    "text, expected",
    [
        (r"a\134b\011c\012d\043e", "a\\b\tc\nd#e"),
        (r"abcd", r"abcd"),
    ],
)
def test_unmangle_octal(text, expected):
    assert unmangle_octal(text) == expected


def test_mounts():
    mounts = parse_mounts(MOUNTS)
    assert len(mounts) == 4


def test_mount_fields():
    root = parse_mounts(MOUNTS)[2]
    assert root.fs_spec == "/dev/mapper/ol-root"
    assert root.fs_file == "/"
    assert root.fs_vfstype == "xfs"
    assert root.fs_mntops["logbufs"] == "8"
    assert root.fs_mntops["rw"] is None
    assert "noquota" in root.fs_mntops
    assert (root.fs_freq, root.fs_passno) == (0, 0)


def test_mount_with_escaped_path():
    (entry,) = parse_mounts(rb"/dev/sdb1 /media/my\040disk\011x ext4 rw 1 2" + b"\n")
    assert entry.fs_file == "/media/my\\040disk\tx"
    assert (entry.fs_freq, entry.fs_passno) == (1, 2)


@pytest.mark.parametrize(
    "line", ["proc /proc proc rw 0", "proc /proc proc rw 0 x", "proc /proc proc rw 0 256"]
)
def test_mount_errors(line):
    with pytest.raises(InternalError):
        parse_mounts(line)


def test_read_mounts(tmp_path):
    path = tmp_path / "mounts"
    path.write_text(MOUNTS)
    mounts = read_mounts(path)
    assert [m.fs_vfstype for m in mounts] == ["proc", "sysfs", "xfs", "vboxsf"]


def test_read_mounts_missing(tmp_path):
    with pytest.raises(NotFoundError):
        read_mounts(tmp_path / "missing")