"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

FrameHandler = Callable[[bytes], None]


class FrameTransport(Protocol):
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
        """Write one frame and return the first command response notification.

        Notifications on ``query_char_uuid`` that arrive meanwhile are passed
        to ``on_query`` as they come.
        """
