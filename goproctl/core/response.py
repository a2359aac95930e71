"""Decoder for frames received on the command response channel.

Frame layout::

    +------------------+-----+-------------+--------------------+
    | Remaining length | Tag | Status code | Payload            |
    | 1 byte           | 1 B | 1 byte      | 0..n bytes         |
    +------------------+-----+-------------+--------------------+

- Remaining length: number of bytes after itself
- Status code: 0/1 acknowledgement for commands without a payload
- Payload: command-specific, itself made of length-prefixed fields
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from goproctl.core.actions import CommandID
from goproctl.core.errors import (
    InvalidBooleanError,
    InvalidValueError,
    LengthMismatchError,
    NilBufferError,
    TooShortError,
    UnknownTagError,
)
from goproctl.core.model import CommandStatus, HardwareInfo

MIN_FRAME_LENGTH = 3
DATE_TIME_PAYLOAD_LENGTH = 8

# Commands whose response is only the 0/1 status code
ACK_FIELDS: dict[CommandID, str] = {
    CommandID.SHUTTER: "shutter",
    CommandID.SLEEP: "sleep",
    CommandID.SET_DATE_TIME: "set_date_time",
    CommandID.SET_LOCAL_DATE_TIME: "set_local_date_time",
    CommandID.SET_LIVESTREAM_MODE: "set_livestream_mode",
    CommandID.WIFI_AP: "wifi_ap",
    CommandID.HILIGHT_MOMENT: "hilight_moment",
    CommandID.LOAD_PRESET_GROUP: "load_preset_group",
    CommandID.LOAD_PRESET: "load_preset",
    CommandID.ANALYTICS: "analytics",
}


def to_bool(value: int, *, context: str) -> bool:
    if value == 0:
        return False
    if value == 1:
        return True
    raise InvalidBooleanError(f"{context}: {value} is not 0 or 1")


def hex_string(data: bytes) -> str:
    """Render bytes as unpadded lower-case hex pairs joined by colons."""
    return ":".join(f"{b:x}" for b in data)


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


# Order of the chained fields in a hardware-info payload
HARDWARE_FIELDS: tuple[tuple[str, Callable[[bytes], str]], ...] = (
    ("model_number", hex_string),
    ("model_name", _text),
    ("board", _text),
    ("firmware_version", _text),
    ("serial_number", _text),
    ("ssid", _text),
    ("ap_mac_address", hex_string),
)

# Fields whose length byte must be exactly this value
HARDWARE_FIELD_WIDTHS: dict[str, int] = {"model_number": 4}


def decode_hardware_info(payload: bytes, hardware: HardwareInfo) -> None:
    """Walk the chain of length-prefixed hardware fields into ``hardware``.

    Each field is ``[length][bytes...]`` and the next field starts right
    after it. Fields decoded before a truncated one stay set.

    Raises:
        TooShortError: a length byte or field body runs past the payload.
            ``offset`` is the payload position of that field's length byte.
        InvalidValueError: a fixed-width field has the wrong length byte.
    """
    offset = 0
    for name, render in HARDWARE_FIELDS:
        if offset >= len(payload):
            raise TooShortError(
                f"Hardware info ends before field '{name}' at offset {offset}",
                offset=offset,
                field=name,
            )
        width = HARDWARE_FIELD_WIDTHS.get(name)
        if width is not None and payload[offset] != width:
            raise InvalidValueError(
                f"Hardware field '{name}' at offset {offset} must be {width} bytes, got {payload[offset]}"
            )
        start = offset + 1
        end = start + payload[offset]
        if end > len(payload):
            raise TooShortError(
                f"Hardware field '{name}' at offset {offset} needs {payload[offset]} bytes, "
                f"{len(payload) - start} left",
                offset=offset,
                field=name,
            )
        setattr(hardware, name, render(payload[start:end]))
        offset = end


def decode_date_time(payload: bytes) -> datetime:
    """Decode ``[length][year:2][month][day][hour][minute][second]``.

    The camera sends no sub-second part and no zone, so the result is naive.
    """
    if len(payload) < DATE_TIME_PAYLOAD_LENGTH:
        raise TooShortError(
            f"Date-time payload needs {DATE_TIME_PAYLOAD_LENGTH} bytes, got {len(payload)}: {payload.hex()}",
            offset=len(payload),
            field="date_time",
        )
    year = int.from_bytes(payload[1:3], "big")
    month, day, hour, minute, second = payload[3:8]
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError as exc:
        raise InvalidValueError(f"Invalid camera date-time {payload.hex()}: {exc}") from exc


def _apply_date_time(payload: bytes, status: CommandStatus) -> None:
    status.date_time = decode_date_time(payload)


def _apply_local_date_time(payload: bytes, status: CommandStatus) -> None:
    status.local_date_time = decode_date_time(payload)


def _apply_hardware_info(payload: bytes, status: CommandStatus) -> None:
    decode_hardware_info(payload, status.hardware)


def _apply_version(payload: bytes, status: CommandStatus) -> None:
    # [1][major][1][minor]; no patch number on the wire
    if len(payload) < 4:
        raise TooShortError(
            f"Version payload needs 4 bytes, got {len(payload)}: {payload.hex()}",
            offset=len(payload),
            field="open_gopro_version",
        )
    status.open_gopro_version.major = payload[1]
    status.open_gopro_version.minor = payload[3]


PAYLOAD_HANDLERS: dict[CommandID, Callable[[bytes, CommandStatus], None]] = {
    CommandID.GET_DATE_TIME: _apply_date_time,
    CommandID.GET_LOCAL_DATE_TIME: _apply_local_date_time,
    CommandID.GET_HARDWARE_INFO: _apply_hardware_info,
    CommandID.GET_VERSION: _apply_version,
}


def decode_response(frame: bytes | bytearray | None, status: CommandStatus) -> CommandID:
    """Decode one command response frame into ``status``.

    Only the field(s) belonging to the frame's tag are written.

    Returns:
        The command the frame answers.

    Raises:
        DecodeError: the frame is malformed or its tag is unknown.
    """
    if frame is None:
        raise NilBufferError("Response frame is None")
    data = bytes(frame)
    if len(data) < MIN_FRAME_LENGTH:
        raise TooShortError(
            f"Response frame length {len(data)} is less than minimum of {MIN_FRAME_LENGTH}: {data.hex()}",
            offset=len(data),
        )
    declared = data[0]
    if len(data) - 1 != declared:
        raise LengthMismatchError(
            f"Response frame declares {declared} bytes after the length byte, has {len(data) - 1}: {data.hex()}"
        )

    tag, status_code, payload = data[1], data[2], data[3:]
    try:
        command = CommandID(tag)
    except ValueError:
        raise UnknownTagError(f"Unknown response tag {tag} (0x{tag:02x}): {data.hex()}", tag=tag) from None

    field_name = ACK_FIELDS.get(command)
    if field_name is not None:
        setattr(status, field_name, to_bool(status_code, context=f"{command.name} status"))
        return command

    handler = PAYLOAD_HANDLERS.get(command)
    if handler is None:
        raise UnknownTagError(f"No response decoder for {command.name} (0x{tag:02x})", tag=tag)
    handler(payload, status)
    return command
