"""Stable public API for building tooling on top of goproctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from datetime import datetime

from goproctl.core.actions import Action, CommandID, action_names, build_action, encode
from goproctl.core.errors import (
    ActionError,
    DecodeError,
    FieldWidthError,
    GoproctlError,
    InvalidBooleanError,
    InvalidValueError,
    LengthMismatchError,
    NilBufferError,
    StatusTableLoadError,
    StatusTableValidationError,
    TooShortError,
    TransportConnectError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
    UnknownTagError,
    UnsupportedTagError,
)
from goproctl.core.model import (
    ActionResult,
    CommandStatus,
    DeviceProfile,
    HardwareInfo,
    QueryStatus,
    SemVer,
)
from goproctl.core.query import decode_query_notification, decode_query_record, iter_query_records
from goproctl.core.response import decode_response
from goproctl.core.service import CameraSession
from goproctl.core.status_table import StatusTable, load_status_table
from goproctl.core.zeropad import to_uint
from goproctl.transports.base import FrameTransport
from goproctl.transports.ble_gatt import BLEGATTTransport

__all__ = [
    "GoproctlError",
    "ActionError",
    "DecodeError",
    "FieldWidthError",
    "InvalidBooleanError",
    "InvalidValueError",
    "LengthMismatchError",
    "NilBufferError",
    "StatusTableLoadError",
    "StatusTableValidationError",
    "TooShortError",
    "UnknownTagError",
    "UnsupportedTagError",
    "TransportError",
    "TransportConnectError",
    "TransportSendError",
    "TransportTimeoutError",
    "Action",
    "ActionResult",
    "CommandID",
    "CommandStatus",
    "DeviceProfile",
    "HardwareInfo",
    "QueryStatus",
    "SemVer",
    "StatusTable",
    "FrameTransport",
    "BLEGATTTransport",
    "CameraSession",
    "Client",
    "action_names",
    "build_action",
    "encode",
    "decode_response",
    "decode_query_record",
    "decode_query_notification",
    "iter_query_records",
    "load_status_table",
    "to_uint",
]


class Client:
    """Public client for driving one camera.

    A `Client` wraps a `CameraSession`: it resolves named actions, sends
    their frames through the transport, and keeps the latest command and
    query status decoded from what the camera sends back.
    """

    def __init__(
        self,
        address: str,
        *,
        transport: FrameTransport | None = None,
        profile: DeviceProfile | None = None,
    ) -> None:
        self._session = CameraSession(address, transport=transport, profile=profile)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._session.load_warnings

    @property
    def command_status(self) -> CommandStatus:
        return self._session.command_status

    @property
    def query_status(self) -> QueryStatus:
        return self._session.query_status

    def list_actions(self) -> tuple[str, ...]:
        return action_names()

    def perform(self, name: str, *, when: datetime | None = None) -> ActionResult:
        return self._session.perform(build_action(name, when=when))

    def perform_action(self, action: Action) -> ActionResult:
        return self._session.perform(action)

    def feed_command_response(self, data: bytes) -> CommandID:
        return self._session.handle_command_response(data)

    def feed_query_notification(self, data: bytes) -> list[int]:
        return self._session.handle_query_notification(data)
