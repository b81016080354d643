import pytest

from kprocfs.kpageflags import PhysicalPageFlags


def test_kpageflags_parsing():
    entry = 0b0000000000000000000000000000000000000000000000000000000000000001
    assert PhysicalPageFlags.parse_info(entry) == PhysicalPageFlags.LOCKED


def test_unknown_bits_are_dropped():
    info = PhysicalPageFlags.parse_info((1 << 40) | (1 << 63) | 0b10)
    assert info == PhysicalPageFlags.ERROR
    assert int(info) == 2


def test_combined_flags():
    info = PhysicalPageFlags.parse_info((1 << 5) | (1 << 12) | (1 << 26))
    assert info == PhysicalPageFlags.LRU | PhysicalPageFlags.ANON | PhysicalPageFlags.PGTABLE
    assert PhysicalPageFlags.DIRTY not in info


@pytest.mark.parametrize(
    "bit, flag",
    [
        (4, PhysicalPageFlags.DIRTY),
        (17, PhysicalPageFlags.HUGE),
        (20, PhysicalPageFlags.NOPAGE),
        (24, PhysicalPageFlags.ZERO_PAGE),
    ],
)
def test_bit_positions(bit, flag):
    assert PhysicalPageFlags.parse_info(1 << bit) == flag


def test_all_known_bits():
    assert int(PhysicalPageFlags.parse_info((1 << 64) - 1)) == (1 << 27) - 1


def test_zero():
    assert int(PhysicalPageFlags.parse_info(0)) == 0