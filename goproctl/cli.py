"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from dataclasses import fields
from datetime import datetime

import typer

from goproctl.core.actions import CommandID, action_names, build_action
from goproctl.core.errors import GoproctlError
from goproctl.core.model import CommandStatus, DeviceProfile, HardwareInfo, QueryStatus
from goproctl.core.query import decode_query_notification
from goproctl.core.response import ACK_FIELDS, decode_response
from goproctl.core.service import CameraSession
from goproctl.core.status_table import default_status_table

app = typer.Typer(help="Encode, decode and send GoPro BLE command frames")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


def _parse_hex(value: str) -> bytes:
    try:
        return bytes.fromhex(value.replace(":", "").replace(" ", ""))
    except ValueError as exc:
        raise typer.BadParameter(f"'{value}' is not a hex byte string") from exc


def _parse_when(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"'{value}' is not an ISO 8601 date-time") from exc


def _format_value(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _command_lines(command: CommandID, status: CommandStatus) -> list[str]:
    field_name = ACK_FIELDS.get(command)
    if field_name is not None:
        return [f"{field_name}: {getattr(status, field_name)}"]
    if command is CommandID.GET_HARDWARE_INFO:
        return [f"{f.name}: {getattr(status.hardware, f.name)}" for f in fields(HardwareInfo)]
    if command is CommandID.GET_VERSION:
        return [f"open_gopro_version: {status.open_gopro_version}"]
    if command is CommandID.GET_LOCAL_DATE_TIME:
        return [f"local_date_time: {_format_value(status.local_date_time)}"]
    return [f"date_time: {_format_value(status.date_time)}"]


def _build_session(address: str, timeout: float) -> CameraSession:
    session = CameraSession(address, profile=DeviceProfile(timeout_s=timeout))
    for warning in session.load_warnings:
        typer.echo(f"Warning: {warning}", err=True)
    return session


@app.command("actions")
def list_actions() -> None:
    """List named actions and the frames they encode to."""
    for name in action_names():
        typer.echo(f"{name}: {build_action(name).encode().hex()}")


@app.command("encode")
def encode_action(
    name: str,
    at: str | None = typer.Option(None, "--at", help="ISO 8601 time for date-time actions"),
) -> None:
    """Print the frame for a named action as hex."""
    try:
        action = build_action(name, when=_parse_when(at))
        typer.echo(action.encode().hex())
    except GoproctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("decode-response")
def decode_response_frame(frame: str) -> None:
    """Decode one command response frame given as hex."""
    try:
        status = CommandStatus()
        command = decode_response(_parse_hex(frame), status)
        typer.echo(f"{command.name} (0x{command.value:02x})")
        for line in _command_lines(command, status):
            typer.echo(f"  {line}")
    except GoproctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("decode-query")
def decode_query_buffer(buffer: str) -> None:
    """Decode a query notification of one or more status records given as hex."""
    try:
        table = default_status_table()
        for warning in table.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        status = QueryStatus()
        for tag in decode_query_notification(_parse_hex(buffer), status, table):
            field_name = table.field_for(tag)
            typer.echo(f"{tag} {field_name}: {_format_value(getattr(status, field_name))}")
    except GoproctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("send")
def send_action(
    name: str,
    address: str = typer.Option(..., "--address", help="Camera BLE address"),
    at: str | None = typer.Option(None, "--at", help="ISO 8601 time for date-time actions"),
    timeout: float = typer.Option(5.0, "--timeout", help="Seconds to wait for the response"),
) -> None:
    """Send a named action to a camera and decode its response."""
    try:
        session = _build_session(address, timeout)
        result = session.perform(build_action(name, when=_parse_when(at)))
        typer.echo(f"Sent {name} to {result.address} frame={result.frame_hex}")
        if result.response_hex:
            typer.echo(f"response={result.response_hex}")
            for line in _command_lines(CommandID(result.tag), session.command_status):
                typer.echo(f"  {line}")
        for tag in result.query_tags:
            field_name = session.status_table.field_for(tag)
            value = getattr(session.query_status, field_name)
            typer.echo(f"  status {tag} {field_name}: {_format_value(value)}")
    except GoproctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
