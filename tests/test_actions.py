from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone, tzinfo

import pytest

from goproctl.core.actions import (
    ACTIONS,
    Action,
    CommandID,
    action_names,
    build_action,
    encode,
    get_version,
    load_preset_group_photo,
    load_preset_group_timelapse,
    load_preset_group_video,
    set_date_time,
    set_local_date_time,
    shutter_off,
    shutter_on,
)
from goproctl.core.errors import ActionError


class _SummerZone(tzinfo):
    def utcoffset(self, dt: datetime | None) -> timedelta:
        return timedelta(hours=2)

    def dst(self, dt: datetime | None) -> timedelta:
        return timedelta(hours=1)

    def tzname(self, dt: datetime | None) -> str:
        return "CEST"


def test_known_frames() -> None:
    assert get_version().encode() == bytes([0x01, 0x51])
    assert shutter_on().encode() == bytes([0x03, 0x01, 0x01, 0x01])
    assert shutter_off().encode() == bytes([0x03, 0x01, 0x01, 0x00])
    assert load_preset_group_video().encode() == bytes([0x04, 0x3E, 0x02, 0x03, 0xE8])
    assert load_preset_group_photo().encode() == bytes([0x04, 0x3E, 0x02, 0x03, 0xE9])
    assert load_preset_group_timelapse().encode() == bytes([0x04, 0x3E, 0x02, 0x03, 0xEA])


def test_no_parameter_frame_uses_sentinel() -> None:
    assert encode(0x20) == b"\x01\x20"
    assert Action(0x05).encode() == b"\x01\x05"


@pytest.mark.parametrize("count", [1, 2, 7, 100, 253])
def test_parameter_frame_length(count: int) -> None:
    params = bytes(range(count))
    frame = encode(0x10, params)
    assert len(frame) == count + 3
    assert frame[0] == count + 2
    assert frame[1] == 0x10
    assert frame[2] == count
    assert frame[3:] == params


def test_too_many_parameters_rejected() -> None:
    with pytest.raises(ActionError):
        encode(0x10, bytes(254))


def test_tag_out_of_range_rejected() -> None:
    with pytest.raises(ActionError):
        encode(0x100)


def test_set_date_time_layout() -> None:
    frame = set_date_time(datetime(2018, 1, 31, 3, 4, 5)).encode()
    assert frame.hex() == "090d0707e2011f030405"


def test_set_local_date_time_negative_offset() -> None:
    when = datetime(2018, 1, 31, 3, 4, 5, tzinfo=timezone(timedelta(hours=-6)))
    frame = set_local_date_time(when).encode()
    assert frame[:3] == bytes([0x0C, 0x0F, 0x0A])
    assert frame[3:10].hex() == "07e2011f030405"
    # -6 hours, then -360 minutes, both two's complement
    assert frame[10:] == bytes([0xFA, 0x98, 0x00])


def test_set_local_date_time_half_hour_offset() -> None:
    when = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))
    frame = set_local_date_time(when).encode()
    assert frame[10:] == bytes([5, 330 & 0xFF, 0])


def test_set_local_date_time_dst_flag() -> None:
    when = datetime(2024, 7, 1, 12, 0, 0, tzinfo=_SummerZone())
    frame = set_local_date_time(when).encode()
    assert frame[10:] == bytes([2, 120, 1])


@pytest.fixture
def eastern_host_zone(monkeypatch: pytest.MonkeyPatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    # POSIX rule string, so no tz database is needed
    monkeypatch.setenv("TZ", "EST+05EDT,M3.2.0,M11.1.0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_set_local_date_time_naive_summer_uses_host_dst(eastern_host_zone) -> None:
    frame = set_local_date_time(datetime(2024, 7, 1, 12, 0, 0)).encode()
    assert frame[3:10].hex() == "07e807010c0000"
    # -4 hours, -240 minutes, DST
    assert frame[10:] == bytes([0xFC, 0x10, 0x01])


def test_set_local_date_time_naive_winter_uses_host_dst(eastern_host_zone) -> None:
    frame = set_local_date_time(datetime(2024, 1, 15, 12, 0, 0)).encode()
    assert frame[10:] == bytes([0xFB, 0xD4, 0x00])


def test_build_local_date_time_action_sets_dst(eastern_host_zone) -> None:
    action = build_action("set-local-date-time", when=datetime(2024, 7, 1, 12, 0, 0))
    assert action.parameters[-1] == 1
    aware = datetime(2024, 7, 1, 12, 0, 0).astimezone()
    assert build_action("set-local-date-time", when=aware).parameters[-1] == 1


def test_foreign_fixed_offset_is_not_dst(eastern_host_zone) -> None:
    when = datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert set_local_date_time(when).parameters[-1] == 0


def test_every_named_action_uses_a_known_command() -> None:
    for name, builder in ACTIONS.items():
        frame = builder().encode()
        assert frame[1] in set(CommandID), name


def test_build_action_by_name() -> None:
    assert build_action("version") == get_version()
    when = datetime(2020, 2, 29, 23, 59, 58)
    assert build_action("set-date-time", when=when) == set_date_time(when)
    assert "set-local-date-time" in action_names()


def test_build_unknown_action_lists_available() -> None:
    with pytest.raises(ActionError) as exc:
        build_action("self-destruct")
    assert "Available:" in str(exc.value)
    assert "shutter-on" in str(exc.value)


def test_action_repr() -> None:
    assert repr(shutter_on()) == "Action(tag=0x01, parameters=01)"
    assert repr(get_version()) == "Action(tag=0x51, parameters=(none))"
