"""Command identifiers, the outbound frame encoder, and named actions.

Frame layout::

    +-----------+-----+  no parameters; byte 0 is always 0x01
    | 0x01      | tag |
    +-----------+-----+-----------+----------------------+
    | N + 2     | tag | N         | parameters (N bytes) |
    +-----------+-----+-----------+----------------------+

With parameters, byte 0 counts every byte that follows it. Without
parameters the firmware expects the constant 0x01 rather than a true
length.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import IntEnum

from goproctl.core.errors import ActionError

NO_PARAMETER_SENTINEL = 0x01
MAX_PARAMETERS = 0xFF - 2


class CommandID(IntEnum):
    """Command tags shared by requests and their responses."""

    SHUTTER = 0x01
    SLEEP = 0x05
    SET_DATE_TIME = 0x0D
    GET_DATE_TIME = 0x0E
    SET_LOCAL_DATE_TIME = 0x0F
    GET_LOCAL_DATE_TIME = 0x10
    SET_LIVESTREAM_MODE = 0x15
    WIFI_AP = 0x17
    HILIGHT_MOMENT = 0x18
    GET_HARDWARE_INFO = 0x3C
    LOAD_PRESET_GROUP = 0x3E
    LOAD_PRESET = 0x40
    ANALYTICS = 0x50
    GET_VERSION = 0x51


# Preset group IDs 1000-1002, big-endian
PRESET_GROUP_VIDEO = b"\x03\xe8"
PRESET_GROUP_PHOTO = b"\x03\xe9"
PRESET_GROUP_TIMELAPSE = b"\x03\xea"


def encode(tag: int, parameters: bytes = b"") -> bytes:
    """Serialize a command tag and its parameter bytes into one frame."""
    if not 0 <= tag <= 0xFF:
        raise ActionError(f"Command tag must be 0-255, got {tag}")
    params = bytes(parameters)
    if not params:
        return bytes([NO_PARAMETER_SENTINEL, tag])
    if len(params) > MAX_PARAMETERS:
        raise ActionError(
            f"Command 0x{tag:02x} carries {len(params)} parameter bytes, max is {MAX_PARAMETERS}"
        )
    return bytes([len(params) + 2, tag, len(params)]) + params


@dataclass(frozen=True)
class Action:
    """One outbound operation: a command tag and its serialized parameters."""

    tag: int
    parameters: bytes = b""

    def encode(self) -> bytes:
        return encode(self.tag, self.parameters)

    def __repr__(self) -> str:
        params = self.parameters.hex(" ") if self.parameters else "(none)"
        return f"Action(tag=0x{self.tag:02X}, parameters={params})"


def _date_time_bytes(when: datetime) -> bytes:
    return when.year.to_bytes(2, "big") + bytes(
        [when.month, when.day, when.hour, when.minute, when.second]
    )


def shutter_on() -> Action:
    return Action(CommandID.SHUTTER, b"\x01")


def shutter_off() -> Action:
    return Action(CommandID.SHUTTER, b"\x00")


def sleep() -> Action:
    return Action(CommandID.SLEEP)


def set_date_time(when: datetime) -> Action:
    """Set the camera clock from the wall-clock fields of ``when``."""
    return Action(CommandID.SET_DATE_TIME, _date_time_bytes(when))


def get_date_time() -> Action:
    return Action(CommandID.GET_DATE_TIME)


def _is_dst(when: datetime, offset_seconds: float) -> bool:
    dst = when.dst()
    if dst is not None:
        return bool(dst)
    # Fixed-offset zone, e.g. from astimezone(): ask the host zone, but only
    # when the offset is the host's own at that instant.
    local = time.localtime(when.timestamp())
    return local.tm_isdst > 0 and local.tm_gmtoff == offset_seconds


def set_local_date_time(when: datetime) -> Action:
    """Set the camera clock plus its UTC offset and daylight-saving flag.

    A naive ``when`` is taken to be in the host's local zone. The offset is
    sent as two bytes: whole hours, then the whole offset expressed in
    minutes (not the minutes remainder), each truncated toward zero and
    stored two's-complement.
    """
    if when.tzinfo is None:
        when = when.astimezone()
    offset = when.utcoffset() or timedelta(0)
    offset_seconds = offset.total_seconds()
    hours = int(offset_seconds / 3600)
    minutes = int(offset_seconds / 60)
    is_dst = 1 if _is_dst(when, offset_seconds) else 0
    params = _date_time_bytes(when) + bytes([hours & 0xFF, minutes & 0xFF, is_dst])
    return Action(CommandID.SET_LOCAL_DATE_TIME, params)


def get_local_date_time() -> Action:
    return Action(CommandID.GET_LOCAL_DATE_TIME)


def access_point_on() -> Action:
    return Action(CommandID.WIFI_AP, b"\x01")


def access_point_off() -> Action:
    return Action(CommandID.WIFI_AP, b"\x00")


def hilight_moment() -> Action:
    """Tag a highlight moment in the media currently being captured."""
    return Action(CommandID.HILIGHT_MOMENT)


def get_hardware_info() -> Action:
    return Action(CommandID.GET_HARDWARE_INFO)


def load_preset_group_video() -> Action:
    return Action(CommandID.LOAD_PRESET_GROUP, PRESET_GROUP_VIDEO)


def load_preset_group_photo() -> Action:
    return Action(CommandID.LOAD_PRESET_GROUP, PRESET_GROUP_PHOTO)


def load_preset_group_timelapse() -> Action:
    return Action(CommandID.LOAD_PRESET_GROUP, PRESET_GROUP_TIMELAPSE)


def analytics() -> Action:
    """Claim third-party client analytics on the camera."""
    return Action(CommandID.ANALYTICS)


def get_version() -> Action:
    return Action(CommandID.GET_VERSION)


# Mapping from CLI-friendly names to builders
ACTIONS: dict[str, Callable[[], Action]] = {
    "shutter-on": shutter_on,
    "shutter-off": shutter_off,
    "sleep": sleep,
    "get-date-time": get_date_time,
    "get-local-date-time": get_local_date_time,
    "ap-on": access_point_on,
    "ap-off": access_point_off,
    "hilight": hilight_moment,
    "hardware-info": get_hardware_info,
    "preset-video": load_preset_group_video,
    "preset-photo": load_preset_group_photo,
    "preset-timelapse": load_preset_group_timelapse,
    "analytics": analytics,
    "version": get_version,
}

TIMED_ACTIONS: dict[str, Callable[[datetime], Action]] = {
    "set-date-time": set_date_time,
    "set-local-date-time": set_local_date_time,
}


def action_names() -> tuple[str, ...]:
    return tuple(sorted([*ACTIONS, *TIMED_ACTIONS]))


def build_action(name: str, when: datetime | None = None) -> Action:
    """Resolve a named action. Timed actions default to the current local time."""
    if name in ACTIONS:
        return ACTIONS[name]()
    if name in TIMED_ACTIONS:
        return TIMED_ACTIONS[name](when if when is not None else datetime.now().astimezone())
    available = ", ".join(action_names())
    raise ActionError(f"Unknown action '{name}'. Available: {available}")
