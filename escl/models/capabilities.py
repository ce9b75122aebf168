"""Capabilities models for eSCL scanners."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .enums import CcdChannel, ColorMode, ContentType, InputSource, ScanIntent
from .parsing import (
    as_list,
    child,
    child_int,
    child_text,
    child_texts,
    decode_document,
    required_text,
)


@dataclass(frozen=True)
class Certification:
    """A certification the scanner claims, e.g. Mopria."""

    name: str | None = None
    version: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Certification:
        """Create a Certification from a ``scan:Certification`` element."""
        return cls(name=child_text(data, "Name"), version=child_text(data, "Version"))


@dataclass(frozen=True)
class DiscreteResolution:
    """A supported X/Y resolution pair, in dots per inch."""

    x_resolution: int
    y_resolution: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiscreteResolution:
        """Create a DiscreteResolution from a ``scan:DiscreteResolution`` element."""
        x_resolution = child_int(data, "XResolution")
        y_resolution = child_int(data, "YResolution")
        if x_resolution is None or y_resolution is None:
            msg = "DiscreteResolution requires XResolution and YResolution"
            raise ValueError(msg)
        return cls(x_resolution=x_resolution, y_resolution=y_resolution)


@dataclass(frozen=True)
class SupportRange:
    """An integer range advertised for compression factor or sharpening."""

    min: int | None = None
    max: int | None = None
    normal: int | None = None
    step: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SupportRange | None:
        """Create a SupportRange, or None if the element is absent."""
        if not isinstance(data, dict):
            return None
        return cls(
            min=child_int(data, "Min"),
            max=child_int(data, "Max"),
            normal=child_int(data, "Normal"),
            step=child_int(data, "Step"),
        )

    def __contains__(self, value: object) -> bool:
        """Return True if ``value`` lies within the advertised bounds."""
        if not isinstance(value, int):
            return False
        if self.min is not None and value < self.min:
            return False
        return self.max is None or value <= self.max


@dataclass(frozen=True)
class SettingProfile:
    """
    A combination of settings the scanner supports for an input source.

    Every attribute is a list: scanners emit these elements either once or
    repeatedly, and both forms decode to a list in document order.
    """

    color_modes: list[ColorMode] = field(default_factory=list)
    content_types: list[ContentType] = field(default_factory=list)
    document_formats: list[str] = field(default_factory=list)
    document_formats_ext: list[str] = field(default_factory=list)
    supported_resolutions: list[DiscreteResolution] = field(default_factory=list)
    color_spaces: list[str] = field(default_factory=list)
    ccd_channels: list[CcdChannel] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SettingProfile:
        """Create a SettingProfile from a ``scan:SettingProfile`` element."""
        formats = child(data, "DocumentFormats")
        resolutions = child(child(data, "SupportedResolutions"), "DiscreteResolutions")
        return cls(
            color_modes=[
                ColorMode(value)
                for value in child_texts(child(data, "ColorModes"), "ColorMode")
            ],
            content_types=[
                ContentType(value)
                for value in child_texts(child(data, "ContentTypes"), "ContentType")
            ],
            document_formats=child_texts(formats, "DocumentFormat"),
            document_formats_ext=child_texts(formats, "DocumentFormatExt"),
            supported_resolutions=[
                DiscreteResolution.from_dict(item)
                for item in as_list(child(resolutions, "DiscreteResolution"))
                if isinstance(item, dict)
            ],
            color_spaces=child_texts(child(data, "ColorSpaces"), "ColorSpace"),
            ccd_channels=[
                CcdChannel(value)
                for value in child_texts(child(data, "CcdChannels"), "CcdChannel")
            ],
        )


@dataclass(frozen=True)
class InputCaps:
    """
    Capabilities of one input source (platen or document feeder).

    Widths, heights and margins are in 1/300 inch; optical resolutions are in
    dots per inch.
    """

    min_width: int | None = None
    max_width: int | None = None
    min_height: int | None = None
    max_height: int | None = None
    max_scan_regions: int | None = None
    setting_profiles: list[SettingProfile] = field(default_factory=list)
    supported_intents: list[ScanIntent] = field(default_factory=list)
    max_optical_x_resolution: int | None = None
    max_optical_y_resolution: int | None = None
    risky_left_margin: int | None = None
    risky_right_margin: int | None = None
    risky_top_margin: int | None = None
    risky_bottom_margin: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> InputCaps | None:
        """Create an InputCaps, or None if the element is absent."""
        if not isinstance(data, dict):
            return None
        return cls(
            min_width=child_int(data, "MinWidth"),
            max_width=child_int(data, "MaxWidth"),
            min_height=child_int(data, "MinHeight"),
            max_height=child_int(data, "MaxHeight"),
            max_scan_regions=child_int(data, "MaxScanRegions"),
            setting_profiles=[
                SettingProfile.from_dict(profile)
                for profile in as_list(
                    child(child(data, "SettingProfiles"), "SettingProfile")
                )
                if isinstance(profile, dict)
            ],
            supported_intents=[
                ScanIntent(value)
                for value in child_texts(child(data, "SupportedIntents"), "Intent")
            ],
            max_optical_x_resolution=child_int(data, "MaxOpticalXResolution"),
            max_optical_y_resolution=child_int(data, "MaxOpticalYResolution"),
            risky_left_margin=child_int(data, "RiskyLeftMargin"),
            risky_right_margin=child_int(data, "RiskyRightMargin"),
            risky_top_margin=child_int(data, "RiskyTopMargin"),
            risky_bottom_margin=child_int(data, "RiskyBottomMargin"),
        )

    @property
    def color_modes(self) -> list[ColorMode]:
        """Return the color modes of every setting profile, without duplicates."""
        modes: list[ColorMode] = []
        for profile in self.setting_profiles:
            modes.extend(mode for mode in profile.color_modes if mode not in modes)
        return modes


@dataclass(frozen=True)
class Capabilities:
    """
    Represents the ``ScannerCapabilities`` document of an eSCL scanner.

    Attributes:
        version: The eSCL protocol version implemented by the scanner.
        make_and_model: The make and model of the scanner.
        manufacturer: The manufacturer name.
        serial_number: The serial number.
        uuid: The UUID of the scanner.
        admin_uri: The URL of the scanner's administration page.
        icon_uri: The URL of the scanner's icon.
        certifications: Certifications the scanner claims.
        platen: Flatbed capabilities, if the scanner has a flatbed.
        adf_simplex: Single sided feeder capabilities.
        adf_duplex: Double sided feeder capabilities.
        compression_factor_support: Supported compression factor range.
        supported_media_types: Supported media types.
        sharpen_support: Supported sharpening range.

    Example usage:

    >>> caps = Capabilities.from_xml('''
    ... <scan:ScannerCapabilities
    ...     xmlns:scan="http://schemas.hp.com/imaging/escl/2011/05/03"
    ...     xmlns:pwg="http://www.pwg.org/schemas/2010/12/sm">
    ...   <pwg:Version>2.63</pwg:Version>
    ...   <pwg:MakeAndModel>HP LaserJet MFP</pwg:MakeAndModel>
    ... </scan:ScannerCapabilities>''')
    >>> caps.version
    '2.63'
    >>> caps.platen is None
    True

    """

    version: str
    make_and_model: str | None = None
    manufacturer: str | None = None
    serial_number: str | None = None
    uuid: str | None = None
    admin_uri: str | None = None
    icon_uri: str | None = None
    certifications: list[Certification] = field(default_factory=list)
    platen: InputCaps | None = None
    adf_simplex: InputCaps | None = None
    adf_duplex: InputCaps | None = None
    compression_factor_support: SupportRange | None = None
    supported_media_types: list[str] = field(default_factory=list)
    sharpen_support: SupportRange | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Capabilities:
        """Create Capabilities from the ``scan:ScannerCapabilities`` element."""
        adf = child(data, "Adf")
        return cls(
            version=required_text(data, "Version"),
            make_and_model=child_text(data, "MakeAndModel"),
            manufacturer=child_text(data, "Manufacturer"),
            serial_number=child_text(data, "SerialNumber"),
            uuid=child_text(data, "UUID"),
            admin_uri=child_text(data, "AdminURI"),
            icon_uri=child_text(data, "IconURI"),
            certifications=[
                Certification.from_dict(item)
                for item in as_list(
                    child(child(data, "Certifications"), "Certification")
                )
                if isinstance(item, dict)
            ],
            platen=InputCaps.from_dict(
                child(child(data, "Platen"), "PlatenInputCaps")
            ),
            adf_simplex=InputCaps.from_dict(child(adf, "AdfSimplexInputCaps")),
            adf_duplex=InputCaps.from_dict(child(adf, "AdfDuplexInputCaps")),
            compression_factor_support=SupportRange.from_dict(
                child(data, "CompressionFactorSupport")
            ),
            supported_media_types=child_texts(
                child(data, "SupportedMediaTypes"), "MediaType"
            ),
            sharpen_support=SupportRange.from_dict(child(data, "SharpenSupport")),
        )

    @classmethod
    def from_xml(cls, document: str | bytes) -> Capabilities:
        """
        Create Capabilities from a ``ScannerCapabilities`` XML document.

        Raises:
            EsclDecodeError: The document is malformed or not a capabilities
                document.

        """
        return decode_document(document, "ScannerCapabilities", cls.from_dict)

    def input_caps(self, source: InputSource) -> InputCaps | None:
        """Return the capabilities for an input source, if the scanner has it."""
        if source == InputSource.PLATEN:
            return self.platen
        if source == InputSource.FEEDER:
            return self.adf_simplex or self.adf_duplex
        return None
