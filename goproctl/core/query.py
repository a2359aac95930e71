"""Decoder for status records received on the query response channel.

Record layout::

    +-----+--------------+---------------------+
    | Tag | Value length | Value               |
    | 1 B | 1 byte       | value length bytes  |
    +-----+--------------+---------------------+

A single notification can carry several records back to back with no
outer header. ``decode_query_record`` decodes exactly one record and
expects to be handed exactly one; ``iter_query_records`` does the
splitting.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from goproctl.core.errors import (
    InvalidValueError,
    LengthMismatchError,
    NilBufferError,
    TooShortError,
    UnknownTagError,
    UnsupportedTagError,
)
from goproctl.core.model import QueryStatus
from goproctl.core.response import to_bool
from goproctl.core.status_table import StatusRule, StatusTable, ValueKind, default_status_table
from goproctl.core.zeropad import to_uint

RECORD_HEADER_LENGTH = 2
MIN_RECORD_LENGTH = 3


def _convert(rule: StatusRule, value: bytes) -> Any:
    if rule.kind is ValueKind.UNSUPPORTED:
        raise UnsupportedTagError(
            f"Status {rule.tag} ({rule.field}) has no decoder: {value.hex()}", tag=rule.tag
        )
    if rule.kind is ValueKind.TEXT:
        return value.decode("utf-8", errors="replace")

    number = to_uint(value, 64, "big")
    if rule.kind is ValueKind.BOOL:
        return to_bool(number, context=f"Status {rule.tag} ({rule.field})")
    if rule.kind is ValueKind.DURATION:
        try:
            return rule.duration_unit * number
        except OverflowError as exc:
            raise InvalidValueError(
                f"Status {rule.tag} ({rule.field}): {number} {rule.unit} is out of range"
            ) from exc
    if rule.kind is ValueKind.BYTESIZE:
        return number * rule.bytesize_unit
    return number


def decode_query_record(
    buffer: bytes | bytearray | None,
    status: QueryStatus,
    table: StatusTable | None = None,
) -> int:
    """Decode the single record in ``buffer`` into ``status``.

    Returns:
        The record's value length. The caller advances its cursor by this
        plus the two header bytes.

    Raises:
        DecodeError: the record is malformed, its tag is unknown, or its
            value does not fit the tag's kind. ``status`` is untouched.
        FieldWidthError: a numeric value is wider than 64 bits.
    """
    if buffer is None:
        raise NilBufferError("Query record buffer is None")
    data = bytes(buffer)
    if len(data) < MIN_RECORD_LENGTH:
        raise TooShortError(
            f"Query record length {len(data)} is less than minimum of {MIN_RECORD_LENGTH}: {data.hex()}",
            offset=len(data),
        )

    tag, declared = data[0], data[1]
    value = data[RECORD_HEADER_LENGTH:]
    if declared != len(value):
        raise LengthMismatchError(
            f"Query record declares {declared} value bytes, has {len(value)}: {data.hex()}"
        )

    rules = table if table is not None else default_status_table()
    rule = rules.get(tag)
    if rule is None:
        raise UnknownTagError(f"Unknown status {tag}: {data.hex()}", tag=tag)

    setattr(status, rule.field, _convert(rule, value))
    return declared


def iter_query_records(buffer: bytes | bytearray) -> Iterator[bytes]:
    """Yield each record of a concatenated notification as its own slice.

    Raises:
        TooShortError: a record header or value runs past the end of
            ``buffer``; records before it have already been yielded.
    """
    data = bytes(buffer)
    offset = 0
    while offset < len(data):
        if offset + RECORD_HEADER_LENGTH > len(data):
            raise TooShortError(
                f"Query record header at offset {offset} is truncated: {data.hex()}",
                offset=offset,
            )
        end = offset + RECORD_HEADER_LENGTH + data[offset + 1]
        if end > len(data):
            raise TooShortError(
                f"Query record at offset {offset} declares {data[offset + 1]} value bytes, "
                f"{len(data) - offset - RECORD_HEADER_LENGTH} left",
                offset=offset,
            )
        yield data[offset:end]
        offset = end


def decode_query_notification(
    buffer: bytes | bytearray | None,
    status: QueryStatus,
    table: StatusTable | None = None,
) -> list[int]:
    """Decode every record in a notification, in order.

    Stops at the first failing record and raises its error; records decoded
    before it stay applied.

    Returns:
        The tags that were written, in wire order.
    """
    if buffer is None:
        raise NilBufferError("Query notification buffer is None")
    tags: list[int] = []
    for record in iter_query_records(buffer):
        decode_query_record(record, status, table)
        tags.append(record[0])
    return tags
