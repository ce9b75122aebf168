"""Client for scanners speaking the eSCL protocol."""

from .const import LOGGER
from .exceptions import (
    EsclConfigurationError,
    EsclDecodeError,
    EsclDiscoveryError,
    EsclError,
    EsclMissingLocationError,
    EsclTransportError,
    EsclUnexpectedStatusError,
)
from .models import (
    Capabilities,
    ColorMode,
    DeviceEndpoint,
    InputSource,
    ScanIntent,
    ScannerStatus,
    ScanRegion,
    ScanSettings,
    build_scan_settings,
    select_color_mode,
)
from .client import EsclClient, ScanJob
from .discovery import discover

__all__ = [
    "LOGGER",
    "Capabilities",
    "ColorMode",
    "DeviceEndpoint",
    "EsclClient",
    "EsclConfigurationError",
    "EsclDecodeError",
    "EsclDiscoveryError",
    "EsclError",
    "EsclMissingLocationError",
    "EsclTransportError",
    "EsclUnexpectedStatusError",
    "InputSource",
    "ScanIntent",
    "ScanJob",
    "ScanRegion",
    "ScanSettings",
    "ScannerStatus",
    "build_scan_settings",
    "discover",
    "select_color_mode",
]
