"""
Exception hierarchy for launchgrid.

Validation errors also derive from ValueError so they behave like ordinary
argument errors for callers that do not know about this package.
"""

from typing import Optional


class LaunchpadError(Exception):
    """Base class for all launchgrid errors."""

    pass


class NoSuchDevice(LaunchpadError):
    """Raised when the requested MIDI input or output does not exist."""

    pass


class DeviceBusy(LaunchpadError):
    """Raised when a MIDI port exists but could not be opened."""

    pass


class NoInputAllowed(LaunchpadError):
    """Raised when reading from a device opened without input (or closed)."""

    pass


class NoOutputAllowed(LaunchpadError):
    """Raised when writing to a device opened without output (or closed)."""

    pass


class InvalidCoordinates(LaunchpadError, ValueError):
    """Raised when grid x/y are outside 0-7 or missing."""

    pass


class InvalidBrightness(LaunchpadError, ValueError):
    """Raised when a brightness is not one of 0-3 or a known name."""

    pass


class UnknownMessage(LaunchpadError, ValueError):
    """Raised when an incoming MIDI message does not map to any button."""

    pass


class CommunicationError(LaunchpadError):
    """
    Raised when talking to the device fails while interacting.

    The underlying transport failure is kept in ``source`` (and chained as
    ``__cause__`` where raised with ``from``).
    """

    def __init__(self, source: Optional[BaseException] = None, message: Optional[str] = None):
        self.source = source
        super().__init__(message or (str(source) if source is not None else "communication with device failed"))
