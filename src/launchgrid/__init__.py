"""
Launchgrid: Novation Launchpad driver and event dispatch

Talks to the original 8x8 Launchpad over MIDI: switch single LEDs or all 80
at once, control flashing and double buffering, and react to button presses
by registering responders on an Interaction that polls the device in the
background.
"""

__version__ = "0.1.0"

# Main API
from .callbacks import ResponderTable
from .config import ConfigurationError, DeviceConfig, InteractionConfig

# Button, color and action models
from .controls import (
    Action,
    AllButtons,
    Brightness,
    ButtonIdentity,
    ButtonState,
    ButtonType,
    Color,
    ControlButton,
    GridButton,
    Mode,
    RawMessage,
    SceneButton,
    StateFilter,
    button_identity,
)
from .device import Device

# Exceptions
from .errors import (
    CommunicationError,
    DeviceBusy,
    InvalidBrightness,
    InvalidCoordinates,
    LaunchpadError,
    NoInputAllowed,
    NoOutputAllowed,
    NoSuchDevice,
    UnknownMessage,
)
from .interaction import Interaction

# Logging configuration
from .logging_config import (
    get_logger,
    set_module_level,
    setup_logging,
)
from .midi_io import MidoTransport, PortInfo, TransportError

__all__ = [
    # Version
    "__version__",
    # Main API
    "Device",
    "Interaction",
    "ResponderTable",
    # Models
    "Action",
    "AllButtons",
    "Brightness",
    "ButtonIdentity",
    "ButtonState",
    "ButtonType",
    "Color",
    "ControlButton",
    "GridButton",
    "Mode",
    "RawMessage",
    "SceneButton",
    "StateFilter",
    "button_identity",
    # Configuration models
    "DeviceConfig",
    "InteractionConfig",
    "ConfigurationError",
    # Transport
    "MidoTransport",
    "PortInfo",
    "TransportError",
    # Exceptions
    "LaunchpadError",
    "NoSuchDevice",
    "DeviceBusy",
    "NoInputAllowed",
    "NoOutputAllowed",
    "InvalidCoordinates",
    "InvalidBrightness",
    "UnknownMessage",
    "CommunicationError",
    # Logging configuration
    "setup_logging",
    "get_logger",
    "set_module_level",
]
