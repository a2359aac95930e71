"""Session layer used by the CLI and the public API.

A ``CameraSession`` is the handle that ties one camera address to a
transport and to the two status snapshots the codec fills. Each session
owns its snapshots, so decoding for one camera never touches another's.
"""

from __future__ import annotations

import logging

from goproctl.core.actions import Action, CommandID
from goproctl.core.errors import DecodeError, FieldWidthError
from goproctl.core.model import ActionResult, CommandStatus, DeviceProfile, QueryStatus
from goproctl.core.query import decode_query_record, iter_query_records
from goproctl.core.response import decode_response
from goproctl.core.status_table import StatusTable, default_status_table
from goproctl.transports.base import FrameTransport
from goproctl.transports.ble_gatt import BLEGATTTransport

LOGGER = logging.getLogger(__name__)


class CameraSession:
    def __init__(
        self,
        address: str,
        *,
        transport: FrameTransport | None = None,
        profile: DeviceProfile | None = None,
        status_table: StatusTable | None = None,
    ) -> None:
        self.address = address
        self.transport = transport or BLEGATTTransport()
        self.profile = profile or DeviceProfile()
        self.status_table = status_table if status_table is not None else default_status_table()
        self.command_status = CommandStatus()
        self.query_status = QueryStatus()

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self.status_table.warnings

    def perform(self, action: Action) -> ActionResult:
        """Send ``action`` and decode the camera's answer into ``command_status``.

        Raises:
            TransportError: the frame could not be delivered.
            DecodeError: the response frame was malformed.
        """
        frame = action.encode()
        query_tags: list[int] = []

        def _on_query(data: bytes) -> None:
            query_tags.extend(self.handle_query_notification(data))

        response = self.transport.send(
            self.address,
            frame,
            write_char_uuid=self.profile.write_char_uuid,
            response_char_uuid=self.profile.response_char_uuid,
            query_char_uuid=self.profile.query_char_uuid,
            on_query=_on_query,
            write_with_response=self.profile.write_with_response,
            timeout_s=self.profile.timeout_s,
        )
        if response:
            self.handle_command_response(response)

        return ActionResult(
            address=self.address,
            tag=action.tag,
            frame_hex=frame.hex(),
            response_hex=response.hex() if response else None,
            query_tags=tuple(query_tags),
        )

    def handle_command_response(self, data: bytes) -> CommandID:
        command = decode_response(data, self.command_status)
        LOGGER.debug("Decoded %s response from %s", command.name, self.address)
        return command

    def handle_query_notification(self, data: bytes) -> list[int]:
        """Apply every decodable record in a query notification.

        A record that fails to decode is logged and dropped; the records
        after it are still applied. A broken record header ends the
        notification since the next record cannot be located.
        """
        tags: list[int] = []
        records = iter_query_records(data)
        while True:
            try:
                record = next(records)
            except StopIteration:
                break
            except DecodeError as exc:
                LOGGER.warning("Dropping rest of query notification from %s: %s", self.address, exc)
                break
            try:
                decode_query_record(record, self.query_status, self.status_table)
            except (DecodeError, FieldWidthError) as exc:
                LOGGER.warning("Dropping query record from %s: %s", self.address, exc)
                continue
            tags.append(record[0])
        return tags
