from __future__ import annotations

import pytest
from bleak.exc import BleakError

from goproctl.core.errors import TransportConnectError, TransportSendError, TransportTimeoutError
from goproctl.core.model import COMMAND_REQUEST_UUID, COMMAND_RESPONSE_UUID, QUERY_RESPONSE_UUID
from goproctl.transports import ble_gatt
from goproctl.transports.ble_gatt import BLEGATTTransport

ADDRESS = "D4:D9:19:A1:B2:C3"


class FakeBleakClient:
    connected = True
    replies: dict[str, list[bytes]] = {}
    write_error: Exception | None = None
    instances: list["FakeBleakClient"] = []

    def __init__(self, address: str, timeout: float = 10.0) -> None:
        self.address = address
        self.timeout = timeout
        self.handlers: dict[str, object] = {}
        self.writes: list[tuple[str, bytes, bool]] = []
        self.stopped: list[str] = []
        type(self).instances.append(self)

    async def __aenter__(self) -> "FakeBleakClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def start_notify(self, uuid: str, handler) -> None:
        self.handlers[uuid] = handler

    async def stop_notify(self, uuid: str) -> None:
        self.stopped.append(uuid)

    async def write_gatt_char(self, uuid: str, data: bytes, response: bool = False) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.writes.append((uuid, bytes(data), response))
        for char_uuid, payloads in self.replies.items():
            handler = self.handlers.get(char_uuid)
            if handler is None:
                continue
            for payload in payloads:
                handler(None, bytearray(payload))


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> type[FakeBleakClient]:
    class Client(FakeBleakClient):
        replies = {}
        instances = []

    monkeypatch.setattr(ble_gatt, "BleakClient", Client)
    return Client


def _send(transport: BLEGATTTransport, **kwargs) -> bytes | None:
    options = {
        "write_char_uuid": COMMAND_REQUEST_UUID,
        "response_char_uuid": COMMAND_RESPONSE_UUID,
        "timeout_s": 0.2,
    }
    options.update(kwargs)
    return transport.send(ADDRESS, b"\x01\x05", **options)


def test_send_returns_first_response(fake_client) -> None:
    fake_client.replies = {COMMAND_RESPONSE_UUID: [b"\x02\x05\x00", b"\x02\x05\x01"]}

    assert _send(BLEGATTTransport()) == b"\x02\x05\x00"
    client = fake_client.instances[0]
    assert client.writes == [(COMMAND_REQUEST_UUID, b"\x01\x05", False)]
    assert client.stopped == [COMMAND_RESPONSE_UUID]


def test_send_forwards_query_notifications(fake_client) -> None:
    fake_client.replies = {
        COMMAND_RESPONSE_UUID: [b"\x02\x05\x00"],
        QUERY_RESPONSE_UUID: [b"\x02\x01\x03", b"\x46\x01\x55"],
    }
    seen: list[bytes] = []

    _send(BLEGATTTransport(), query_char_uuid=QUERY_RESPONSE_UUID, on_query=seen.append)
    assert seen == [b"\x02\x01\x03", b"\x46\x01\x55"]
    assert fake_client.instances[0].stopped == [COMMAND_RESPONSE_UUID, QUERY_RESPONSE_UUID]


def test_send_without_response_characteristic(fake_client) -> None:
    assert _send(BLEGATTTransport(), response_char_uuid=None, write_with_response=True) is None
    assert fake_client.instances[0].writes == [(COMMAND_REQUEST_UUID, b"\x01\x05", True)]


def test_send_times_out(fake_client) -> None:
    with pytest.raises(TransportTimeoutError):
        _send(BLEGATTTransport(), timeout_s=0.1)
    assert fake_client.instances[0].stopped == [COMMAND_RESPONSE_UUID]


def test_send_not_connected(fake_client) -> None:
    fake_client.connected = False
    with pytest.raises(TransportConnectError):
        _send(BLEGATTTransport())


def test_send_wraps_bleak_errors(fake_client) -> None:
    fake_client.write_error = BleakError("characteristic not found")
    with pytest.raises(TransportSendError) as exc:
        _send(BLEGATTTransport())
    assert "characteristic not found" in str(exc.value)
