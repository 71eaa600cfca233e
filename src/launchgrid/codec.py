"""
Translation between Launchpad semantics and MIDI byte triples.

Pure functions, no state. Encoding covers single LED writes, the 80 LED rapid
update and the device-level control messages; decoding turns incoming
messages into Actions.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Union

from .controls import (
    CONTROL_TYPES,
    Action,
    Brightness,
    ButtonIdentity,
    ButtonState,
    Color,
    ControlButton,
    GridButton,
    Mode,
    RawMessage,
    SceneButton,
)
from .errors import InvalidBrightness, InvalidCoordinates, UnknownMessage
from .midi_codes import (
    BATCH_SIZE,
    DOWN_VELOCITY,
    GRID_SIZE,
    GRID_STRIDE,
    BUFFERING_BASE,
    SCENE_NOTES,
    ControlNote,
    GridLayout,
    Status,
    Velocity,
)

ColorLike = Union[Color, Mapping[str, Any], int, None]

CONTROL_NOTES = {button: ControlNote[button.name].value for button in CONTROL_TYPES}

# Reverse lookup for decoding
_CONTROL_BY_NOTE = {note: ControlButton(button=button) for button, note in CONTROL_NOTES.items()}
_SCENE_BY_NOTE = {note: SceneButton(number=i + 1) for i, note in enumerate(SCENE_NOTES)}


def status_for(identity: ButtonIdentity) -> int:
    """Control buttons are addressed with CC, everything else with note on."""
    return Status.CC if isinstance(identity, ControlButton) else Status.ON


def note_for(identity: ButtonIdentity) -> int:
    """
    data1 for a button.

    Raises:
        InvalidCoordinates: For the ``all`` wildcard or a grid cell outside 0-7
    """
    if isinstance(identity, ControlButton):
        return CONTROL_NOTES[identity.button]
    if isinstance(identity, SceneButton):
        return SCENE_NOTES[identity.number - 1]
    if isinstance(identity, GridButton):
        # GridButton validates on construction; model_construct() skips that
        if not (0 <= identity.x < GRID_SIZE and 0 <= identity.y < GRID_SIZE):
            raise InvalidCoordinates(f"grid coordinates out of range: x={identity.x} y={identity.y}")
        return identity.y * GRID_STRIDE + identity.x
    raise InvalidCoordinates("the 'all' wildcard is not an addressable button")


def to_color(color: ColorLike) -> Color:
    """
    Normalize the accepted color inputs.

    Raw color bytes (16 * green + red) are split into their red and green
    levels, so both must be 0-3 like any other brightness.

    Raises:
        InvalidBrightness: A level outside 0-3
        TypeError: Not a color, mapping, int or None
    """
    if color is None:
        return Color.OFF
    if isinstance(color, Color):
        return color
    if isinstance(color, Mapping):
        return Color(red=color.get("red"), green=color.get("green"))
    if isinstance(color, int) and not isinstance(color, bool):
        if color < 0:
            raise InvalidBrightness(f"raw color byte (16 * green + red) can't be negative, got {color}")
        return Color(red=color % 16, green=color // 16)
    raise TypeError(f"unsupported color value: {color!r}")


def encode_velocity(color: ColorLike, mode: Union[Mode, str] = Mode.NORMAL) -> int:
    """data2 for a LED write: 16 * green + red + mode flag."""
    return to_color(color).value + Mode(mode).flag


def encode_change(
    identity: ButtonIdentity,
    color: ColorLike = None,
    mode: Union[Mode, str] = Mode.NORMAL,
) -> RawMessage:
    """
    Encode a single LED write.

    Args:
        identity: Button to change (not the ``all`` wildcard)
        color: Color, {"red": ..., "green": ...} mapping, or raw color byte
        mode: Normal, flashing or buffering

    Raises:
        InvalidCoordinates: Grid cell outside 0-7 or the ``all`` wildcard
        InvalidBrightness: Brightness not one of the four levels
    """
    return RawMessage(status=status_for(identity), data1=note_for(identity), data2=encode_velocity(color, mode))


def encode_all(colors: Iterable[ColorLike]) -> list[RawMessage]:
    """
    Encode a rapid update of all 80 LEDs.

    Colors are given grid first (row-major), then the scene buttons top to
    bottom, then the control buttons left to right. Missing entries are
    switched off, entries past 80 are ignored.

    Returns:
        Layout select message followed by 40 MULTI messages (two LEDs each)
    """
    colors = list(colors)[:BATCH_SIZE]
    colors += [0] * (BATCH_SIZE - len(colors))
    velocities = [encode_velocity(color) for color in colors]

    # Any normal message resets the rapid update pointer; the X-Y layout select does that
    messages = [RawMessage(status=Status.CC, data1=Status.NIL, data2=GridLayout.XY)]
    for i in range(0, BATCH_SIZE, 2):
        messages.append(RawMessage(status=Status.MULTI, data1=velocities[i], data2=velocities[i + 1]))
    return messages


def reset_message() -> RawMessage:
    """Switch off all LEDs and reset all settings."""
    return RawMessage(status=Status.CC, data1=Status.NIL, data2=Velocity.RESET)


def control_message(data2: int) -> RawMessage:
    """Device-level control message (CC on note 0)."""
    return RawMessage(status=Status.CC, data1=Status.NIL, data2=data2)


def light_all_message(brightness: Any = Brightness.HIGH) -> RawMessage:
    """Light every LED at a uniform brightness; brightness 0 resets instead."""
    level = Brightness.parse(brightness)
    if level is Brightness.OFF:
        return reset_message()
    return control_message(Velocity.TEST_LEDS + level)


def buffering_data(display_buffer: int = 0, update_buffer: int = 0, copy: bool = False, flashing: bool = False) -> int:
    """
    data2 of the double buffering control message.

    Bit layout: display buffer (bit 0), update buffer (bit 2), flashing
    (bit 3), copy (bit 4), on top of base 0x20.
    """
    for name, buffer in (("display_buffer", display_buffer), ("update_buffer", update_buffer)):
        if buffer not in (0, 1):
            raise ValueError(f"{name} must be 0 or 1, got {buffer!r}")
    data = BUFFERING_BASE + display_buffer + (update_buffer << 2)
    if copy:
        data += 1 << 4
    if flashing:
        data += 1 << 3
    return data


def decode(status: int, data1: int, data2: int, timestamp: int = 0) -> Action:
    """
    Decode an incoming message into an Action.

    Velocity 127 means pressed, anything else released.

    Raises:
        UnknownMessage: The message does not belong to any button
    """
    state = ButtonState.DOWN if data2 == DOWN_VELOCITY else ButtonState.UP

    if status == Status.CC:
        identity = _CONTROL_BY_NOTE.get(data1)
    elif status == Status.ON:
        identity = _SCENE_BY_NOTE.get(data1)
        if identity is None:
            x, y = data1 % GRID_STRIDE, data1 // GRID_STRIDE
            identity = GridButton(x=x, y=y) if x < GRID_SIZE and y < GRID_SIZE else None
    else:
        identity = None

    if identity is None:
        raise UnknownMessage(f"no button for message {status:#04x} {data1:#04x} {data2:#04x}")

    return Action(timestamp=timestamp, state=state, identity=identity)


def decode_message(message: RawMessage) -> Action:
    """Decode a RawMessage read from the transport."""
    return decode(message.status, message.data1, message.data2, message.timestamp)

