"""
MIDI wire constants for the Launchpad.

Status bytes, the fixed note numbers of the control and scene buttons, and the
data2 values of the device-level control messages (all sent as CC on note 0).
"""

from enum import IntEnum


class Status(IntEnum):
    """MIDI status bytes (channel 1)."""

    NIL = 0x00
    OFF = 0x80
    ON = 0x90
    MULTI = 0x92  # Rapid LED update, two velocities per message
    CC = 0xB0


class ControlNote(IntEnum):
    """data1 of the 8 control buttons along the top edge (sent as CC)."""

    UP = 0x68
    DOWN = 0x69
    LEFT = 0x6A
    RIGHT = 0x6B
    SESSION = 0x6C
    USER1 = 0x6D
    USER2 = 0x6E
    MIXER = 0x6F


# data1 of the 8 scene buttons along the right edge, top to bottom (sent as ON)
SCENE_NOTES: tuple[int, ...] = (0x08, 0x18, 0x28, 0x38, 0x48, 0x58, 0x68, 0x78)


class Velocity(IntEnum):
    """data2 values of control messages addressed to note 0."""

    RESET = 0x00
    FLASHING_ON = 0x20
    FLASHING_OFF = 0x21
    FLASHING_AUTO = 0x28
    TEST_LEDS = 0x7C


class GridLayout(IntEnum):
    """data2 of the layout select message (CC on note 0)."""

    XY = 0x01
    DRUM_RACK = 0x02


class ModeFlag(IntEnum):
    """Velocity flags controlling which display buffers a LED write affects."""

    NORMAL = 12  # Copy + clear bits: write to both buffers
    FLASHING = 8  # Clear bit only
    BUFFERING = 0  # Update buffer only


GRID_STRIDE = 16
GRID_SIZE = 8
BATCH_SIZE = 80  # 64 grid cells + 8 scene buttons + 8 control buttons
READ_BATCH = 16
BUFFERING_BASE = 0x20
DOWN_VELOCITY = 127
