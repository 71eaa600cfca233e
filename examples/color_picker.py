#!/usr/bin/env python3
"""
Color picker demo for the Novation Launchpad.

This script demonstrates:
- Updating all 80 LEDs at once with change_all()
- Swapping responders at runtime with exclusive registration
- Simulating button presses with respond_to()

Controls:
- UP / DOWN / LEFT: show the full palette in three layouts
- RIGHT: color picker, SCENE1-4 pick red, SCENE5-8 pick green
- MIXER: release to exit
"""

import logging

from launchgrid.controls import SCENE_TYPES, ButtonState
from launchgrid.device import Device
from launchgrid.errors import LaunchpadError
from launchgrid.interaction import Interaction
from launchgrid.logging_config import get_logger, setup_logging

setup_logging(level=logging.INFO)

logger = get_logger(__name__)

OFF_ROW = [0] * 8

# Colors are raw bytes (16 * green + red), 8 rows of 8 grid LEDs followed by
# the 8 scene buttons and the first 4 control buttons
SINGLE = [
    [0, 1, 2, 3, 0, 0, 0, 0],
    [16, 17, 18, 19, 0, 0, 0, 0],
    [32, 33, 34, 35, 0, 0, 0, 0],
    [48, 49, 50, 51, 0, 0, 0, 0],
] + [OFF_ROW] * 5

DOUBLE = [
    [0, 0, 1, 1, 2, 2, 3, 3],
    [0, 0, 1, 1, 2, 2, 3, 3],
    [16, 16, 17, 17, 18, 18, 19, 19],
    [16, 16, 17, 17, 18, 18, 19, 19],
    [32, 32, 33, 33, 34, 34, 35, 35],
    [32, 32, 33, 33, 34, 34, 35, 35],
    [48, 48, 49, 49, 50, 50, 51, 51],
    [48, 48, 49, 49, 50, 50, 51, 51],
    OFF_ROW,
]

MIRRORED = [
    [0, 1, 2, 3, 3, 2, 1, 0],
    [16, 17, 18, 19, 19, 18, 17, 16],
    [32, 33, 34, 35, 35, 34, 33, 32],
    [48, 49, 50, 51, 51, 50, 49, 48],
    [48, 49, 50, 51, 51, 50, 49, 48],
    [32, 33, 34, 35, 35, 34, 33, 32],
    [16, 17, 18, 19, 19, 18, 17, 16],
    [0, 1, 2, 3, 3, 2, 1, 0],
    OFF_ROW,
]

SELECTED = 51


def flatten(rows, controls):
    return [color for row in rows for color in row] + controls


class ColorPicker:
    """Keeps the picked red/green levels and draws the picker view."""

    def __init__(self):
        self.red = 0
        self.green = 0

    def pick(self, red=None, green=None):
        def responder(interaction, action):
            if red is not None:
                self.red = red
            if green is not None:
                self.green = green
            logger.info(f"Picked red={self.red} green={self.green}")
            interaction.device.change_all(self.view())

        return responder

    def view(self):
        grid = [16 * self.green + self.red] * 64
        scenes = [SELECTED if self.red == level else level for level in (3, 2, 1, 0)]
        scenes += [SELECTED if self.green == level else 16 * level for level in (3, 2, 1, 0)]
        return grid + scenes + [16, 16, 16, 48]


def main():
    print("=" * 60)
    print("Launchpad Color Picker Demo")
    print("=" * 60)

    try:
        device = Device()
    except LaunchpadError as e:
        print(f"   ✗ {e}")
        print("\nMake sure your Launchpad is connected via USB.")
        return

    interaction = Interaction(device=device)
    picker = ColorPicker()

    def mute(interaction, action):
        pass

    def palette(rows, controls):
        def responder(interaction, action):
            interaction.device.change_all(flatten(rows, controls))
            # scene buttons do nothing in the palette views
            interaction.response_to(SCENE_TYPES, "down", mute, exclusive=True)

        return responder

    interaction.response_to("up", "down", palette(SINGLE, [48, 16, 16, 16]))
    interaction.response_to("down", "down", palette(DOUBLE, [16, 48, 16, 16]))
    interaction.response_to("left", "down", palette(MIRRORED, [16, 16, 48, 16]))

    @interaction.response_to("right", "down")
    def show_picker(interaction, action):
        for number, level in enumerate((3, 2, 1, 0), start=1):
            interaction.response_to(f"scene{number}", "down", picker.pick(red=level), exclusive=True)
            interaction.response_to(f"scene{number + 4}", "down", picker.pick(green=level), exclusive=True)
        interaction.respond_to("scene8", "down")

    @interaction.response_to("mixer")
    def quit(interaction, action):
        interaction.device.change("mixer", red="hi" if action.state is ButtonState.DOWN else "off")
        if action.state is ButtonState.UP:
            interaction.stop()

    # Start with the first palette
    interaction.respond_to("up", "down")

    print("\nUP/DOWN/LEFT show palettes, RIGHT opens the picker, release MIXER to exit.")

    try:
        interaction.start()
    except LaunchpadError as e:
        print(f"   ✗ Lost connection: {e}")
    except KeyboardInterrupt:
        print("\n\nShutting down...")
    finally:
        interaction.close()
        print("✓ Disconnected from Launchpad")


if __name__ == "__main__":
    main()
