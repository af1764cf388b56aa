import pytest

from tidytap.errors import ConversionError
from tidytap.flags import Flags, flags_from_bits


def test_up_and_running_round_trip():
    wanted = Flags.IFF_UP | Flags.IFF_RUNNING
    flags = flags_from_bits(int(wanted))
    assert flags == wanted
    assert Flags.IFF_UP in flags
    assert Flags.IFF_RUNNING in flags


def test_raw_word_maps_to_members():
    assert flags_from_bits(0x41) == Flags.IFF_UP | Flags.IFF_RUNNING


def test_zero_has_no_flags():
    flags = flags_from_bits(0)
    assert flags == Flags(0)
    assert int(flags) == 0
    assert Flags.IFF_UP not in flags


def test_every_known_flag_is_accepted():
    combined = Flags(0)
    for member in Flags.__members__.values():
        combined |= member
    assert flags_from_bits(int(combined)) == combined


@pytest.mark.parametrize("name", list(Flags.__members__))
def test_each_member_round_trips(name):
    member = Flags[name]
    assert flags_from_bits(int(member)) == member


def test_unknown_bit_raises():
    with pytest.raises(ConversionError) as info:
        flags_from_bits(1 << 30)
    assert info.value.value == 1 << 30


def test_negative_word_raises():
    with pytest.raises(ConversionError):
        flags_from_bits(-1)