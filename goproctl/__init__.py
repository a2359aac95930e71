"""Codec and tooling for the GoPro BLE command/response/query protocol."""

__version__ = "0.1.0"
