"""
Button identities, colors and actions for the Launchpad.

This module defines the value types exchanged between the codec, the device
and the interaction layer. They are Pydantic models validated at construction,
so an invalid grid position or brightness never makes it into a message.
"""

from enum import Enum, IntEnum
from typing import Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import InvalidBrightness, InvalidCoordinates
from .midi_codes import ModeFlag


class ButtonState(str, Enum):
    """Press/release transition of a button."""

    DOWN = "down"
    UP = "up"


class StateFilter(str, Enum):
    """Which transitions a responder reacts to."""

    DOWN = "down"
    UP = "up"
    BOTH = "both"

    def states(self) -> tuple[ButtonState, ...]:
        """Expand to the concrete button states."""
        if self is StateFilter.BOTH:
            return (ButtonState.DOWN, ButtonState.UP)
        return (ButtonState(self.value),)


class ButtonType(str, Enum):
    """Names of every addressable button, plus the ``all`` wildcard."""

    GRID = "grid"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    SESSION = "session"
    USER1 = "user1"
    USER2 = "user2"
    MIXER = "mixer"
    SCENE1 = "scene1"
    SCENE2 = "scene2"
    SCENE3 = "scene3"
    SCENE4 = "scene4"
    SCENE5 = "scene5"
    SCENE6 = "scene6"
    SCENE7 = "scene7"
    SCENE8 = "scene8"
    ALL = "all"

    @property
    def is_control(self) -> bool:
        return self in CONTROL_TYPES

    @property
    def is_scene(self) -> bool:
        return self in SCENE_TYPES


# Left to right along the top edge
CONTROL_TYPES: tuple[ButtonType, ...] = (
    ButtonType.UP,
    ButtonType.DOWN,
    ButtonType.LEFT,
    ButtonType.RIGHT,
    ButtonType.SESSION,
    ButtonType.USER1,
    ButtonType.USER2,
    ButtonType.MIXER,
)

# Top to bottom along the right edge
SCENE_TYPES: tuple[ButtonType, ...] = (
    ButtonType.SCENE1,
    ButtonType.SCENE2,
    ButtonType.SCENE3,
    ButtonType.SCENE4,
    ButtonType.SCENE5,
    ButtonType.SCENE6,
    ButtonType.SCENE7,
    ButtonType.SCENE8,
)


class GridButton(BaseModel):
    """One of the 64 pads, x = column and y = row from the top left."""

    kind: Literal["grid"] = "grid"
    x: int = Field(ge=0, le=7)
    y: int = Field(ge=0, le=7)

    model_config = {"frozen": True}

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise InvalidCoordinates(
                f"grid coordinates must be integers 0-7 from the top left, got x={data.get('x')!r} y={data.get('y')!r}"
            ) from e

    @property
    def type(self) -> ButtonType:
        return ButtonType.GRID


class ControlButton(BaseModel):
    """One of the 8 round buttons along the top edge."""

    kind: Literal["control"] = "control"
    button: ButtonType

    model_config = {"frozen": True}

    @field_validator("button")
    @classmethod
    def validate_control(cls, v):
        if not v.is_control:
            raise ValueError(f"{v.value} is not a control button")
        return v

    @property
    def type(self) -> ButtonType:
        return self.button


class SceneButton(BaseModel):
    """One of the 8 scene launch buttons along the right edge (1 = top)."""

    kind: Literal["scene"] = "scene"
    number: int = Field(ge=1, le=8)

    model_config = {"frozen": True}

    @property
    def type(self) -> ButtonType:
        return SCENE_TYPES[self.number - 1]


class AllButtons(BaseModel):
    """Wildcard identity, only meaningful for dispatch."""

    kind: Literal["all"] = "all"

    model_config = {"frozen": True}

    @property
    def type(self) -> ButtonType:
        return ButtonType.ALL


ButtonIdentity = Union[GridButton, ControlButton, SceneButton, AllButtons]


def button_identity(button: Union[str, ButtonType, ButtonIdentity], x: Optional[int] = None, y: Optional[int] = None) -> ButtonIdentity:
    """
    Build an identity from a button name.

    Args:
        button: Button name ("grid", "mixer", "scene3", "all", ...) or an identity
        x: Column, required for grid buttons
        y: Row, required for grid buttons

    Raises:
        InvalidCoordinates: Grid button without valid x/y
        ValueError: Unknown button name
    """
    if isinstance(button, (GridButton, ControlButton, SceneButton, AllButtons)):
        return button

    button_type = ButtonType(button)
    if button_type is ButtonType.GRID:
        if x is None or y is None:
            raise InvalidCoordinates("grid buttons need both x and y (0-7, from the top left)")
        return GridButton(x=x, y=y)
    if button_type.is_control:
        return ControlButton(button=button_type)
    if button_type.is_scene:
        return SceneButton(number=SCENE_TYPES.index(button_type) + 1)
    return AllButtons()


class Brightness(IntEnum):
    """The four brightness levels of each LED color."""

    OFF = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @classmethod
    def parse(cls, value: Any) -> "Brightness":
        """
        Canonicalize a brightness given as 0-3 or by name.

        Accepted names (case-sensitive): off, low/lo, medium/med, high/hi.

        Raises:
            InvalidBrightness: For anything else
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value <= 3:
                return cls(value)
        elif isinstance(value, str) and value in BRIGHTNESS_NAMES:
            return BRIGHTNESS_NAMES[value]
        raise InvalidBrightness(
            f"brightness must be 0/1/2/3 or off/low/medium/high (lo/med/hi), got {value!r}"
        )


BRIGHTNESS_NAMES: dict[str, Brightness] = {
    "off": Brightness.OFF,
    "low": Brightness.LOW,
    "lo": Brightness.LOW,
    "medium": Brightness.MEDIUM,
    "med": Brightness.MEDIUM,
    "high": Brightness.HIGH,
    "hi": Brightness.HIGH,
}


class Color(BaseModel):
    """
    Red/green LED color.

    Each channel is one of the four brightness levels; None means off.
    """

    red: Brightness = Brightness.OFF
    green: Brightness = Brightness.OFF

    model_config = {"frozen": True}

    OFF: ClassVar["Color"]
    RED: ClassVar["Color"]
    GREEN: ClassVar["Color"]
    AMBER: ClassVar["Color"]
    YELLOW: ClassVar["Color"]

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise InvalidBrightness(
                f"brightness must be 0/1/2/3 or off/low/medium/high (lo/med/hi), "
                f"got red={data.get('red')!r} green={data.get('green')!r}"
            ) from e

    @field_validator("red", "green", mode="before")
    @classmethod
    def parse_brightness(cls, v):
        if v is None:
            return Brightness.OFF
        return Brightness.parse(v)

    @property
    def value(self) -> int:
        """Color byte without mode flags: 16 * green + red."""
        return 16 * int(self.green) + int(self.red)


Color.OFF = Color()
Color.RED = Color(red=Brightness.HIGH)
Color.GREEN = Color(green=Brightness.HIGH)
Color.AMBER = Color(red=Brightness.HIGH, green=Brightness.HIGH)
Color.YELLOW = Color(red=Brightness.MEDIUM, green=Brightness.HIGH)


class Mode(str, Enum):
    """Which display buffers a single LED write affects."""

    NORMAL = "normal"  # Both buffers
    FLASHING = "flashing"  # Split buffers so the LED flashes
    BUFFERING = "buffering"  # Update buffer only

    @property
    def flag(self) -> int:
        return MODE_FLAGS[self]


MODE_FLAGS: dict[Mode, int] = {mode: int(ModeFlag[mode.name]) for mode in Mode}


class RawMessage(BaseModel):
    """A single 3-byte MIDI message as exchanged with the transport."""

    status: int = Field(ge=0, le=255)
    data1: int = Field(ge=0, le=127)
    data2: int = Field(ge=0, le=127)
    timestamp: int = 0  # Milliseconds, transport-defined origin

    model_config = {"frozen": True}

    def as_bytes(self) -> tuple[int, int, int]:
        return (self.status, self.data1, self.data2)


class Action(BaseModel):
    """
    A decoded button press or release.

    Immutable, created fresh for every message read from the device.
    """

    timestamp: int = 0
    state: ButtonState
    identity: ButtonIdentity = Field(discriminator="kind")

    model_config = {"frozen": True}

    @property
    def type(self) -> ButtonType:
        return self.identity.type

    @property
    def x(self) -> Optional[int]:
        return self.identity.x if isinstance(self.identity, GridButton) else None

    @property
    def y(self) -> Optional[int]:
        return self.identity.y if isinstance(self.identity, GridButton) else None

    @property
    def is_down(self) -> bool:
        return self.state is ButtonState.DOWN
