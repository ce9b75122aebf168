"""eSCL document models."""

from .capabilities import (
    Capabilities,
    Certification,
    DiscreteResolution,
    InputCaps,
    SettingProfile,
    SupportRange,
)
from .device import DeviceEndpoint
from .enums import (
    CcdChannel,
    ColorMode,
    ContentType,
    InputSource,
    JobState,
    ScanIntent,
    ScannerState,
)
from .settings import (
    SCAN_OPTIONS_SCHEMA,
    ScanRegion,
    ScanSettings,
    build_scan_settings,
    select_color_mode,
)
from .status import JobInfo, ScannerStatus

__all__ = [
    "SCAN_OPTIONS_SCHEMA",
    "Capabilities",
    "CcdChannel",
    "Certification",
    "ColorMode",
    "ContentType",
    "DeviceEndpoint",
    "DiscreteResolution",
    "InputCaps",
    "InputSource",
    "JobInfo",
    "JobState",
    "ScanIntent",
    "ScanRegion",
    "ScanSettings",
    "ScannerState",
    "ScannerStatus",
    "SettingProfile",
    "SupportRange",
    "build_scan_settings",
    "select_color_mode",
]
