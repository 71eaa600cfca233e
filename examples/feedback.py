#!/usr/bin/env python3
"""
Feedback demo for the Novation Launchpad.

This script demonstrates:
- Registering responders for grid, control and scene buttons
- Lighting a button while it is held down
- Stopping the interaction from a responder (release MIXER to quit)
"""

import logging

from launchgrid.controls import CONTROL_TYPES, SCENE_TYPES, ButtonState
from launchgrid.errors import LaunchpadError
from launchgrid.interaction import Interaction
from launchgrid.logging_config import get_logger, set_module_level, setup_logging

# Set up rich logging to see what's happening
setup_logging(level=logging.INFO)

logger = get_logger(__name__)

# Enable debug logging to see every dispatched action
set_module_level("launchgrid.interaction", logging.DEBUG)


def brightness(action):
    return "hi" if action.state is ButtonState.DOWN else "off"


def main():
    print("=" * 60)
    print("Launchpad Feedback Demo")
    print("=" * 60)

    interaction = Interaction()

    # Red feedback for grid buttons
    @interaction.response_to("grid")
    def grid_feedback(interaction, action):
        interaction.device.change(action.identity, red=brightness(action))

    # Green feedback for the top control buttons
    @interaction.response_to(CONTROL_TYPES)
    def control_feedback(interaction, action):
        interaction.device.change(action.identity, green=brightness(action))

    # Amber feedback for the scene buttons
    @interaction.response_to(SCENE_TYPES)
    def scene_feedback(interaction, action):
        level = brightness(action)
        interaction.device.change(action.identity, red=level, green=level)

    @interaction.response_to("mixer", "up")
    def quit(interaction, action):
        interaction.stop()

    print("\nPress buttons to light them up, release MIXER to exit.")

    try:
        interaction.start()
    except LaunchpadError as e:
        print(f"   ✗ {e}")
        print("\nMake sure your Launchpad is connected via USB.")
    except KeyboardInterrupt:
        print("\n\nShutting down...")
    finally:
        interaction.close()
        print("✓ Disconnected from Launchpad")


if __name__ == "__main__":
    main()
