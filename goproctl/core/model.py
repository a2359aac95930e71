"""Core data models shared by the codec, session, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

COMMAND_REQUEST_UUID = "b5f90072-aa8d-11e3-9046-0002a5d5c51b"
COMMAND_RESPONSE_UUID = "b5f90073-aa8d-11e3-9046-0002a5d5c51b"
QUERY_RESPONSE_UUID = "b5f90077-aa8d-11e3-9046-0002a5d5c51b"


@dataclass
class SemVer:
    major: int = 0
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}.{self.patch}"


@dataclass
class HardwareInfo:
    """Camera identity as reported by the hardware-info command."""

    model_number: str = ""
    model_name: str = ""
    board: str = ""
    firmware_version: str = ""
    serial_number: str = ""
    ssid: str = ""
    ap_mac_address: str = ""


@dataclass
class CommandStatus:
    """Latest known command acknowledgements, fed by the response decoder."""

    shutter: bool = False
    sleep: bool = False
    set_date_time: bool = False
    date_time: datetime | None = None
    set_local_date_time: bool = False
    local_date_time: datetime | None = None
    set_livestream_mode: bool = False
    wifi_ap: bool = False
    hilight_moment: bool = False
    hardware: HardwareInfo = field(default_factory=HardwareInfo)
    load_preset_group: bool = False
    load_preset: bool = False
    analytics: bool = False
    open_gopro_version: SemVer = field(default_factory=SemVer)


@dataclass
class QueryStatus:
    """Latest known camera telemetry, fed by the query decoder.

    Durations are ``timedelta`` values and storage sizes are plain byte
    counts.
    """

    has_internal_battery: bool = False
    battery_level_bars: int = 0
    has_external_battery: bool = False
    external_battery_percent: int = 0
    is_overheating: bool = False
    is_busy: bool = False
    is_quick_capture_enabled: bool = False
    is_encoding: bool = False
    is_lcd_lock_active: bool = False
    video_progress_counter: int = 0
    is_wireless_connections_enabled: bool = False
    pairing_status: int = 0
    pairing_type: int = 0
    time_since_successful_pairing: timedelta = timedelta(0)
    wifi_scan_status: int = 0
    time_since_completed_wifi_scan: timedelta = timedelta(0)
    wifi_provision_status: int = 0
    remote_control_version: int = 0
    is_remote_control_connected: bool = False
    wireless_pairing_status: int = 0
    wlan_ap_ssid: str = ""
    camera_ap_ssid: str = ""
    wireless_device_count: int = 0
    is_preview_stream_enabled: bool = False
    storage_status: int | None = None
    photos_before_full: int = 0
    video_time_before_full: timedelta = timedelta(0)
    group_photos_before_full: int = 0
    total_group_videos: int = 0
    total_photos: int = 0
    total_videos: int = 0
    update_status: int = 0
    is_cancelling_update: bool = False
    is_locate_camera_active: bool = False
    multishot_countdown: int = 0
    remaining_space: int = 0
    is_preview_stream_supported: bool = False
    wifi_bar_strength: int = 0
    tag_hilights_count: int = 0
    time_since_boot_tag_hilight: timedelta = timedelta(0)
    status_update_min_interval_ms: int = 0
    timelapse_time_before_full: timedelta = timedelta(0)
    exposure_mode: int = 0
    exposure_x: int = 0
    exposure_y: int = 0
    is_gps_locked: bool = False
    is_wifi_radio_enabled: bool = False
    internal_battery_percent: int = 0
    mic_accessory_status: int = 0
    digital_zoom_percent: int = 0
    wifi_band_mode: int = 0
    is_digital_zoom_active: bool = False
    is_video_settings_mobile_friendly: bool = False
    is_first_time_mode: bool = False
    is_wifi_5ghz_band_available: bool = False
    is_ready_for_commands: bool = False
    is_battery_good_for_updates: bool = False
    is_too_cold: bool = False
    orientation: int = 0
    is_zoomable_while_encoding: bool = False
    flat_mode: int = 0
    video_preset_id: int = 0
    photo_preset_id: int = 0
    timelapse_preset_id: int = 0
    preset_group_id: int = 0
    preset_id: int = 0
    preset_modified: int = 0
    live_bursts_before_full: int = 0
    live_bursts: int = 0
    is_capture_delay_counting_down: bool = False
    media_mode_status: int = 0
    time_warp_speed: int = 0
    is_linux_core_active: bool = False
    camera_lens_type: int = 0
    is_video_hindsight_capture_active: bool = False
    scheduled_capture_preset_id: int = 0
    is_scheduled_capture_set: bool = False
    media_mode_status_bitmasked: int = 0
    has_storage_minimum_write_speed: bool = False
    storage_write_speed_errors_since_boot: int = 0
    is_turbo_transfer_active: bool = False
    camera_control_status: int = 0
    is_connected_via_usb: bool = False
    usb_control_status: int = 0
    total_storage_space: int = 0


@dataclass(frozen=True)
class DeviceProfile:
    write_char_uuid: str = COMMAND_REQUEST_UUID
    response_char_uuid: str = COMMAND_RESPONSE_UUID
    query_char_uuid: str | None = QUERY_RESPONSE_UUID
    write_with_response: bool = False
    timeout_s: float = 5.0


@dataclass(frozen=True)
class ActionResult:
    address: str
    tag: int
    frame_hex: str
    response_hex: str | None
    query_tags: tuple[int, ...] = ()
