"""BLE GATT transport implementation."""

from __future__ import annotations

import asyncio
import logging
import time

from bleak import BleakClient
from bleak.exc import BleakError

from goproctl.core.errors import (
    TransportConnectError,
    TransportSendError,
    TransportTimeoutError,
)
from goproctl.transports.base import FrameHandler

LOGGER = logging.getLogger(__name__)


class BLEGATTTransport:
    def send(
        self,
        address: str,
        frame: bytes,
        *,
        write_char_uuid: str,
        response_char_uuid: str | None,
        query_char_uuid: str | None = None,
        on_query: FrameHandler | None = None,
        write_with_response: bool = False,
        timeout_s: float = 5.0,
    ) -> bytes | None:
        async def _run() -> bytes | None:
            response: bytes | None = None

            def _response_handler(_: object, data: bytearray) -> None:
                nonlocal response
                if response is None:
                    response = bytes(data)

            def _query_handler(_: object, data: bytearray) -> None:
                if on_query is not None:
                    on_query(bytes(data))

            subscribed: list[str] = []
            async with BleakClient(address, timeout=timeout_s) as client:
                if not client.is_connected:
                    raise TransportConnectError(f"BLE connect failed for {address}")
                LOGGER.debug("Connected to %s", address)

                try:
                    if response_char_uuid:
                        await client.start_notify(response_char_uuid, _response_handler)
                        subscribed.append(response_char_uuid)
                    if query_char_uuid and on_query is not None:
                        await client.start_notify(query_char_uuid, _query_handler)
                        subscribed.append(query_char_uuid)

                    LOGGER.debug("Writing %s to %s", frame.hex(), write_char_uuid)
                    await client.write_gatt_char(
                        write_char_uuid,
                        frame,
                        response=write_with_response,
                    )

                    if not response_char_uuid:
                        return None

                    deadline = time.monotonic() + timeout_s
                    while response is None and time.monotonic() < deadline:
                        await asyncio.sleep(0.05)
                    if response is None:
                        raise TransportTimeoutError(
                            f"Timed out waiting for BLE notification on {response_char_uuid}"
                        )
                    return response
                finally:
                    for uuid in subscribed:
                        try:
                            await client.stop_notify(uuid)
                        except BleakError as exc:
                            LOGGER.debug("stop_notify(%s) failed: %s", uuid, exc)

        try:
            return asyncio.run(_run())
        except TransportTimeoutError:
            raise
        except TransportConnectError:
            raise
        except Exception as exc:
            raise TransportSendError(f"BLE GATT send failed: {exc}") from exc
