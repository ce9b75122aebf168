"""eSCL enums."""

from __future__ import annotations

from enum import Enum

EXTENSION = "EXTENSION"


class VendorExtensibleEnum(str, Enum):
    """
    Base for enumerations that scanner vendors extend with their own tokens.

    Looking up a value that is not a known member yields an extension member
    carrying the raw string instead of raising ``ValueError``.

    Example:
        >>> ColorMode("RGB24")
        <ColorMode.RGB_24: 'RGB24'>
        >>> ColorMode("CMYK32").is_extension
        True
        >>> ColorMode("CMYK32").value
        'CMYK32'

    """

    @classmethod
    def _missing_(cls, value: object) -> VendorExtensibleEnum | None:
        if not isinstance(value, str):
            return None
        member = str.__new__(cls, value)
        member._name_ = EXTENSION
        member._value_ = value
        return member

    @property
    def is_extension(self) -> bool:
        """Return True if the value is not one of the known protocol tokens."""
        return self._name_ == EXTENSION


class ColorMode(VendorExtensibleEnum):
    """
    Represents the color mode of a scan.

    Attributes:
        BLACK_AND_WHITE_1: 1 bit monochrome.
        GRAYSCALE_8: 8 bit grayscale.
        GRAYSCALE_16: 16 bit grayscale.
        RGB_24: 8 bits per channel RGB.
        RGB_48: 16 bits per channel RGB.

    """

    BLACK_AND_WHITE_1 = "BlackAndWhite1"
    GRAYSCALE_8 = "Grayscale8"
    GRAYSCALE_16 = "Grayscale16"
    RGB_24 = "RGB24"
    RGB_48 = "RGB48"


class ContentType(VendorExtensibleEnum):
    """Represents the kind of content on the scanned original."""

    PHOTO = "Photo"
    TEXT = "Text"
    TEXT_AND_PHOTO = "TextAndPhoto"
    LINE_ART = "LineArt"
    MAGAZINE = "Magazine"
    HALFTONE = "Halftone"
    AUTO = "Auto"


class ScanIntent(VendorExtensibleEnum):
    """Represents the intent of a scan, used by the scanner to pick defaults."""

    DOCUMENT = "Document"
    TEXT_AND_GRAPHIC = "TextAndGraphic"
    PHOTO = "Photo"
    PREVIEW = "Preview"
    OBJECT = "Object"
    BUSINESS_CARD = "BusinessCard"


class CcdChannel(VendorExtensibleEnum):
    """Represents the CCD channel used for grayscale scans."""

    RED = "Red"
    GREEN = "Green"
    BLUE = "Blue"
    NTSC = "NTSC"
    GRAY_CCD = "GrayCcd"
    GRAY_CCD_EMULATED = "GrayCcdEmulated"


class InputSource(VendorExtensibleEnum):
    """
    Represents where the scanner takes the original from.

    Attributes:
        PLATEN: Glass flatbed.
        FEEDER: Automatic document feeder.
        CAMERA: Camera input.

    """

    PLATEN = "Platen"
    FEEDER = "Feeder"
    CAMERA = "Camera"


class ScannerState(Enum):
    """
    Represents the state of the scanner.

    Attributes:
        IDLE: The scanner is idle.
        PROCESSING: Busy with some job or activity.
        TESTING: Calibrating, preparing the unit.
        STOPPED: An error condition occurred.
        DOWN: The unit is unavailable.

    """

    IDLE = "Idle"
    PROCESSING = "Processing"
    TESTING = "Testing"
    STOPPED = "Stopped"
    DOWN = "Down"


class JobState(Enum):
    """
    Represents the state of a scan job.

    Attributes:
        CANCELED: End state. Canceled by the client or at the scanner panel.
        ABORTED: End state. Internal, communication or security error.
        COMPLETED: End state. The job finished successfully.
        PENDING: The job was initiated and the scan engine is being prepared.
        PROCESSING: The scanner is scanning and transmitting data.

    """

    CANCELED = "Canceled"
    ABORTED = "Aborted"
    COMPLETED = "Completed"
    PENDING = "Pending"
    PROCESSING = "Processing"
