"""Scan settings model and builder for eSCL scan jobs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import voluptuous as vol
import xmltodict

from escl.const import (
    DEFAULT_VERSION,
    PWG_NAMESPACE,
    SCAN_NAMESPACE,
    THREE_HUNDREDTHS_OF_INCHES,
)
from escl.exceptions import EsclConfigurationError

from .capabilities import Capabilities, InputCaps
from .enums import ColorMode, InputSource, ScanIntent
from .parsing import (
    child,
    child_bool,
    child_int,
    child_text,
    decode_document,
    required_text,
)


@dataclass(frozen=True)
class ScanRegion:
    """
    A rectangular area of the original to scan.

    All values are in 1/300 inch (``escl:ThreeHundredthsOfInches``).
    """

    height: int
    width: int
    x_offset: int = 0
    y_offset: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanRegion:
        """Create a ScanRegion from a ``pwg:ScanRegion`` element."""
        units = child_text(data, "ContentRegionUnits")
        if units is not None and units != THREE_HUNDREDTHS_OF_INCHES:
            msg = f"unsupported ContentRegionUnits {units!r}"
            raise ValueError(msg)
        height = child_int(data, "Height")
        width = child_int(data, "Width")
        if height is None or width is None:
            msg = "ScanRegion requires Height and Width"
            raise ValueError(msg)
        return cls(
            height=height,
            width=width,
            x_offset=child_int(data, "XOffset") or 0,
            y_offset=child_int(data, "YOffset") or 0,
        )

    def to_dict(self) -> dict[str, str]:
        """Return the ``pwg:ScanRegion`` element content."""
        return {
            "pwg:Height": str(self.height),
            "pwg:ContentRegionUnits": THREE_HUNDREDTHS_OF_INCHES,
            "pwg:Width": str(self.width),
            "pwg:XOffset": str(self.x_offset),
            "pwg:YOffset": str(self.y_offset),
        }


@dataclass(frozen=True)
class ScanSettings:
    """
    Represents the ``ScanSettings`` document posted to create a scan job.

    Every attribute except ``version`` is optional. An attribute left as None
    is omitted from the document, and the scanner picks its own default.

    Attributes:
        version: The eSCL protocol version of the request.
        intent: The scan intent.
        scan_region: The area to scan.
        document_format_ext: The output MIME type, e.g. ``image/jpeg``.
        input_source: Where to take the original from.
        x_resolution: Horizontal resolution in dots per inch.
        y_resolution: Vertical resolution in dots per inch.
        color_mode: The color mode.
        compression_factor: Device specific compression factor.
        blank_page_detection: Ask the scanner to drop blank pages.

    """

    version: str = DEFAULT_VERSION
    intent: ScanIntent | None = None
    scan_region: ScanRegion | None = None
    document_format_ext: str | None = None
    input_source: InputSource | None = None
    x_resolution: int | None = None
    y_resolution: int | None = None
    color_mode: ColorMode | None = None
    compression_factor: int | None = None
    blank_page_detection: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the document as an xmltodict mapping, omitting unset fields."""
        settings: dict[str, Any] = {
            "@xmlns:scan": SCAN_NAMESPACE,
            "@xmlns:pwg": PWG_NAMESPACE,
            "pwg:Version": self.version,
        }
        if self.intent is not None:
            settings["scan:Intent"] = self.intent.value
        if self.scan_region is not None:
            settings["pwg:ScanRegions"] = {
                "pwg:ScanRegion": self.scan_region.to_dict()
            }
        if self.document_format_ext is not None:
            settings["scan:DocumentFormatExt"] = self.document_format_ext
        if self.input_source is not None:
            settings["pwg:InputSource"] = self.input_source.value
        if self.x_resolution is not None:
            settings["scan:XResolution"] = str(self.x_resolution)
        if self.y_resolution is not None:
            settings["scan:YResolution"] = str(self.y_resolution)
        if self.color_mode is not None:
            settings["scan:ColorMode"] = self.color_mode.value
        if self.compression_factor is not None:
            settings["scan:CompressionFactor"] = str(self.compression_factor)
        if self.blank_page_detection is not None:
            settings["scan:BlankPageDetection"] = (
                "true" if self.blank_page_detection else "false"
            )
        return {"scan:ScanSettings": settings}

    def to_xml(self) -> str:
        """Encode the settings as the XML body of a ``ScanJobs`` request."""
        return xmltodict.unparse(self.to_dict(), pretty=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanSettings:
        """Create ScanSettings from the ``scan:ScanSettings`` element."""
        intent = child_text(data, "Intent")
        region = child(child(data, "ScanRegions"), "ScanRegion")
        input_source = child_text(data, "InputSource")
        color_mode = child_text(data, "ColorMode")
        return cls(
            version=required_text(data, "Version"),
            intent=ScanIntent(intent) if intent is not None else None,
            scan_region=(
                ScanRegion.from_dict(region) if isinstance(region, dict) else None
            ),
            document_format_ext=child_text(data, "DocumentFormatExt"),
            input_source=(
                InputSource(input_source) if input_source is not None else None
            ),
            x_resolution=child_int(data, "XResolution"),
            y_resolution=child_int(data, "YResolution"),
            color_mode=ColorMode(color_mode) if color_mode is not None else None,
            compression_factor=child_int(data, "CompressionFactor"),
            blank_page_detection=child_bool(data, "BlankPageDetection"),
        )

    @classmethod
    def from_xml(cls, document: str | bytes) -> ScanSettings:
        """Decode a ``ScanSettings`` XML document."""
        return decode_document(document, "ScanSettings", cls.from_dict)


def select_color_mode(color_modes: Iterable[ColorMode]) -> ColorMode | None:
    """
    Pick the highest fidelity RGB mode among those a scanner advertises.

    RGB48 wins over RGB24 regardless of the order the modes are listed in.
    Grayscale and monochrome modes are never picked.

    Returns:
        The selected color mode, or None if neither RGB mode is advertised.

    """
    modes = list(color_modes)
    for preferred in (ColorMode.RGB_48, ColorMode.RGB_24):
        if preferred in modes:
            return preferred
    return None


def _integer(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = "expected int"
        raise vol.Invalid(msg)
    return value


_POSITIVE_INT = vol.All(_integer, vol.Range(min=1))

SCAN_OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional("intent"): vol.Coerce(ScanIntent),
        vol.Optional("region"): ScanRegion,
        vol.Optional("document_format"): str,
        vol.Optional("resolution"): _POSITIVE_INT,
        vol.Optional("x_resolution"): _POSITIVE_INT,
        vol.Optional("y_resolution"): _POSITIVE_INT,
        vol.Optional("input_source"): vol.Coerce(InputSource),
        vol.Optional("color_mode"): vol.Coerce(ColorMode),
        vol.Optional("compression_factor"): vol.All(_integer, vol.Range(min=0)),
        vol.Optional("blank_page_detection"): bool,
    }
)


def _full_region(caps: InputCaps | None) -> ScanRegion | None:
    if caps is None or caps.max_width is None or caps.max_height is None:
        return None
    return ScanRegion(height=caps.max_height, width=caps.max_width)


def _check_region(region: ScanRegion, caps: InputCaps | None) -> None:
    if caps is None:
        return
    if caps.max_width is not None and region.x_offset + region.width > caps.max_width:
        msg = (
            f"Scan region width {region.width} at offset {region.x_offset} "
            f"exceeds the maximum width {caps.max_width}"
        )
        raise EsclConfigurationError(msg)
    if (
        caps.max_height is not None
        and region.y_offset + region.height > caps.max_height
    ):
        msg = (
            f"Scan region height {region.height} at offset {region.y_offset} "
            f"exceeds the maximum height {caps.max_height}"
        )
        raise EsclConfigurationError(msg)


def build_scan_settings(capabilities: Capabilities, **options: Any) -> ScanSettings:
    """
    Build scan settings from scanner capabilities and caller overrides.

    Arguments:
        capabilities: The scanner capabilities, freshly fetched.
        **options: Any of ``intent``, ``region``, ``document_format``,
            ``resolution`` (both axes), ``x_resolution``, ``y_resolution``,
            ``input_source``, ``color_mode``, ``compression_factor`` and
            ``blank_page_detection``. ``x_resolution`` and ``y_resolution``
            take precedence over ``resolution``. Options set to None
            count as not given.

    Returns:
        ScanSettings where unspecified options fall back to capability
        derived defaults: the platen source, its full scan area and the best
        RGB color mode it supports.

    Raises:
        EsclConfigurationError: An option is unknown or has an invalid value,
            or the request falls outside the advertised capabilities.

    """
    options = {key: value for key, value in options.items() if value is not None}
    try:
        options = SCAN_OPTIONS_SCHEMA(options)
    except vol.Invalid as err:
        msg = f"Invalid scan options: {err}"
        raise EsclConfigurationError(msg) from err

    input_source: InputSource | None = options.get("input_source")
    if input_source is None and capabilities.platen is not None:
        input_source = InputSource.PLATEN
    caps = (
        capabilities.input_caps(input_source) if input_source is not None else None
    )

    region: ScanRegion | None = options.get("region")
    if region is None:
        region = _full_region(caps)
    else:
        _check_region(region, caps)

    color_mode: ColorMode | None = options.get("color_mode")
    if color_mode is None and caps is not None:
        color_mode = select_color_mode(caps.color_modes)

    compression_factor: int | None = options.get("compression_factor")
    support = capabilities.compression_factor_support
    if (
        compression_factor is not None
        and support is not None
        and compression_factor not in support
    ):
        msg = (
            f"Compression factor {compression_factor} is outside the supported "
            f"range {support.min}..{support.max}"
        )
        raise EsclConfigurationError(msg)

    resolution: int | None = options.get("resolution")
    return ScanSettings(
        version=capabilities.version,
        intent=options.get("intent"),
        scan_region=region,
        document_format_ext=options.get("document_format"),
        input_source=input_source,
        x_resolution=options.get("x_resolution", resolution),
        y_resolution=options.get("y_resolution", resolution),
        color_mode=color_mode,
        compression_factor=compression_factor,
        blank_page_detection=options.get("blank_page_detection"),
    )
