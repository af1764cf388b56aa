import pytest

from tidytap.errors import ConversionError, TunTapError, ZeroDevicesError


def test_zero_devices_message():
    assert str(ZeroDevicesError()) == "Device count must be greater than zero"


def test_zero_devices_is_package_error():
    err = ZeroDevicesError()
    with pytest.raises(TunTapError) as info:
        raise err
    assert info.value is err
    assert type(info.value) is ZeroDevicesError
    assert str(info.value) == "Device count must be greater than zero"


def test_conversion_error_message_shows_binary():
    err = ConversionError(0b101)
    assert str(err) == (
        "Failed to create Flags from the data returned by the kernel: 101"
    )


def test_conversion_error_keeps_value():
    err = ConversionError(42)
    assert err.value == 42


def test_conversion_error_is_package_error():
    err = ConversionError(7)
    assert isinstance(err, TunTapError)
    assert err.value == 7
    assert str(err) == (
        "Failed to create Flags from the data returned by the kernel: 111"
    )