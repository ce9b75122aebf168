"""Device endpoint model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DeviceEndpoint:
    """
    A scanner found on the local network.

    Attributes:
        base_url: The eSCL base URL, e.g. ``http://192.168.1.20:80/eSCL``.
        name: The human readable name the scanner announces.

    """

    base_url: str
    name: str

    def __str__(self) -> str:
        """Return a user-friendly description of the endpoint."""
        return f"{self.name} ({self.base_url})"
