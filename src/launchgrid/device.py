"""
Launchpad device - LED output and button input over a MIDI transport.

A Device owns at most one input and one output handle. It encodes LED
changes with the codec and decodes pending button messages into Actions.
"""

from collections.abc import Iterable
from typing import Any, Optional, Union

from launchgrid import codec
from launchgrid.config import DeviceConfig, build_config
from launchgrid.controls import (
    Action,
    Brightness,
    ButtonIdentity,
    ButtonType,
    Mode,
    RawMessage,
    button_identity,
)
from launchgrid.errors import (
    DeviceBusy,
    NoInputAllowed,
    NoOutputAllowed,
    NoSuchDevice,
    UnknownMessage,
)
from launchgrid.logging_config import get_logger
from launchgrid.midi_codes import READ_BATCH, Velocity
from launchgrid.midi_io import InputHandle, MidoTransport, OutputHandle, PortInfo, TransportError, find_port

logger = get_logger(__name__)


class Device:
    """
    A Launchpad connected through MIDI.

    Example:
        >>> with Device() as device:
        ...     device.change("grid", Color.RED, x=0, y=0)
        ...     device.change("mixer", {"green": "hi"})
    """

    def __init__(self, config: Optional[DeviceConfig] = None, transport: Any = None, **overrides: Any):
        """
        Open the device.

        Args:
            config: Port selection (defaults to input and output on "Launchpad")
            transport: Transport to open ports with (mido backed if None)
            **overrides: DeviceConfig fields overriding ``config``

        Raises:
            NoSuchDevice: A requested port does not exist
            DeviceBusy: A requested port exists but could not be opened (or reset)
        """
        self._config: DeviceConfig = build_config(DeviceConfig, config, overrides)
        self._transport = transport if transport is not None else MidoTransport()
        self._input: Optional[InputHandle] = None
        self._output: Optional[OutputHandle] = None

        try:
            if self._config.input:
                info = self._resolve(
                    self._transport.list_input_devices(),
                    self._config.input_device_id,
                    "input",
                )
                self._input = self._open(self._transport.open_input, info, "input")
            if self._config.output:
                info = self._resolve(
                    self._transport.list_output_devices(),
                    self._config.output_device_id,
                    "output",
                )
                self._output = self._open(self._transport.open_output, info, "output")
                try:
                    self.reset()
                except TransportError as e:
                    raise DeviceBusy(f"MIDI output device {info.name!r} could not be reset: {e}") from e
        except Exception:
            # Don't leak a half opened device
            self.close()
            raise

    def _resolve(self, ports: list[PortInfo], device_id: Optional[int], kind: str) -> PortInfo:
        if device_id is not None:
            for info in ports:
                if info.id == device_id:
                    return info
            raise NoSuchDevice(f"MIDI {kind} device with id {device_id} doesn't exist")

        info = find_port(ports, self._config.device_name)
        if info is None:
            raise NoSuchDevice(f"MIDI {kind} device {self._config.device_name!r} doesn't exist")
        return info

    @staticmethod
    def _open(opener, info: PortInfo, kind: str):
        try:
            return opener(info.id)
        except LookupError as e:
            raise NoSuchDevice(f"MIDI {kind} device {info.name!r} disappeared: {e}") from e
        except Exception as e:
            raise DeviceBusy(f"MIDI {kind} device {info.name!r} is busy: {e}") from e

    @property
    def config(self) -> DeviceConfig:
        return self._config

    @property
    def closed(self) -> bool:
        """True when neither input nor output is open."""
        return self._input is None and self._output is None

    @property
    def has_input(self) -> bool:
        return self._input is not None

    @property
    def has_output(self) -> bool:
        return self._output is not None

    def close(self) -> None:
        """Close input and output; safe to call repeatedly."""
        if self._input is not None:
            self._input.close()
            self._input = None
        if self._output is not None:
            self._output.close()
            self._output = None

    # Output

    def reset(self) -> None:
        """Switch off all LEDs and reset all settings."""
        self._write([codec.reset_message()])

    def test_leds(self, brightness: Any = Brightness.HIGH) -> None:
        """Light all LEDs at the given brightness (off/0 resets the device)."""
        self._write([codec.light_all_message(brightness)])

    def change(
        self,
        button: Union[str, ButtonType, ButtonIdentity],
        color: codec.ColorLike = None,
        mode: Union[Mode, str] = Mode.NORMAL,
        x: Optional[int] = None,
        y: Optional[int] = None,
        red: Any = None,
        green: Any = None,
    ) -> None:
        """
        Change a single LED.

        Args:
            button: Identity or button name ("grid" needs x and y)
            color: Color, {"red": ..., "green": ...} mapping or raw color byte;
                ``red``/``green`` may be given instead
            mode: Normal, flashing or buffering
            x: Column for grid buttons (0-7, from the left)
            y: Row for grid buttons (0-7, from the top)

        Raises:
            InvalidCoordinates: Missing or out of range grid coordinates
            InvalidBrightness: Unknown brightness
            NoOutputAllowed: Device has no output
        """
        if color is None and (red is not None or green is not None):
            color = {"red": red, "green": green}
        identity = button_identity(button, x, y)
        self._write([codec.encode_change(identity, color, mode)])

    change_led = change

    def change_all(self, colors: Iterable[codec.ColorLike] = ()) -> None:
        """
        Change all 80 LEDs at once.

        Colors are grid (row-major), scene buttons (top to bottom), then
        control buttons (left to right); missing entries are switched off.
        """
        self._write(codec.encode_all(colors))

    change_all_leds = change_all

    def flashing_on(self) -> None:
        """Switch LEDs marked as flashing on (for custom flashing timers)."""
        self._write([codec.control_message(Velocity.FLASHING_ON)])

    def flashing_off(self) -> None:
        """Switch LEDs marked as flashing off (for custom flashing timers)."""
        self._write([codec.control_message(Velocity.FLASHING_OFF)])

    def flashing_auto(self) -> None:
        """Let the device flash LEDs marked as flashing by itself."""
        self._write([codec.control_message(Velocity.FLASHING_AUTO)])

    def buffering_mode(
        self,
        display_buffer: int = 0,
        update_buffer: int = 0,
        copy: bool = False,
        flashing: bool = False,
    ) -> None:
        """
        Control double buffering.

        Args:
            display_buffer: Buffer shown by the LEDs (0 or 1)
            update_buffer: Buffer written by buffering mode LED changes (0 or 1)
            copy: Copy the displayed buffer into the update buffer
            flashing: Alternate between the buffers automatically
        """
        self._write([codec.control_message(codec.buffering_data(display_buffer, update_buffer, copy, flashing))])

    def _write(self, messages: list[RawMessage]) -> None:
        if self._output is None:
            raise NoOutputAllowed("device has no output (disabled or closed)")
        self._output.write(messages)

    # Input

    def read_pending_actions(self) -> list[Action]:
        """
        Read button presses/releases that arrived since the last call.

        Never blocks; returns an empty list when nothing is pending.
        Messages that don't belong to any button are logged and dropped.

        Raises:
            NoInputAllowed: Device has no input
        """
        if self._input is None:
            raise NoInputAllowed("device has no input (disabled or closed)")

        actions = []
        for message in self._input.read(READ_BATCH):
            try:
                actions.append(codec.decode_message(message))
            except UnknownMessage as e:
                logger.warning(f"Dropping MIDI message: {e}")
        return actions

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        sides = [side for side, handle in (("input", self._input), ("output", self._output)) if handle is not None]
        return f"Device({self._config.device_name!r}, {'+'.join(sides) or 'closed'})"
