"""Unit tests for Device."""

import pytest

from launchgrid.config import ConfigurationError, DeviceConfig
from launchgrid.controls import ButtonState, ButtonType, Color, GridButton
from launchgrid.device import Device
from launchgrid.errors import (
    DeviceBusy,
    InvalidBrightness,
    InvalidCoordinates,
    NoInputAllowed,
    NoOutputAllowed,
    NoSuchDevice,
)
from launchgrid.midi_io import PortInfo, TransportError

from conftest import FakeTransport


class TestOpen:
    """Test opening ports."""

    def test_opens_input_and_output_and_resets(self, transport):
        device = Device(transport=transport)
        assert device.has_input and device.has_output
        assert transport.output.written == [(0xB0, 0x00, 0x00)]

    def test_input_disabled(self, transport):
        device = Device(transport=transport, input=False)
        assert not device.has_input
        assert transport.opened_inputs == []
        with pytest.raises(NoInputAllowed):
            device.read_pending_actions()

    def test_output_disabled(self, transport):
        device = Device(transport=transport, output=False)
        assert not device.has_output
        assert transport.opened_outputs == []
        with pytest.raises(NoOutputAllowed):
            device.reset()

    def test_neither_side(self, transport):
        device = Device(transport=transport, input=False, output=False)
        assert device.closed

    def test_selects_by_name(self):
        transport = FakeTransport(
            inputs=[PortInfo(id=0, name="Other"), PortInfo(id=4, name="Launchpad Name")],
            outputs=[PortInfo(id=5, name="Launchpad Name")],
        )
        Device(transport=transport, device_name="Launchpad Name")
        assert transport.input.info.id == 4
        assert transport.output.info.id == 5

    def test_name_prefix_match(self):
        transport = FakeTransport(
            inputs=[PortInfo(id=2, name="Launchpad:Launchpad MIDI 1 20:0")],
            outputs=[PortInfo(id=3, name="Launchpad:Launchpad MIDI 1 20:0")],
        )
        Device(transport=transport)
        assert transport.input.info.id == 2

    def test_selects_by_id(self):
        transport = FakeTransport(
            inputs=[PortInfo(id=0, name="Launchpad"), PortInfo(id=1, name="Launchpad")],
            outputs=[PortInfo(id=0, name="Launchpad"), PortInfo(id=1, name="Launchpad")],
        )
        Device(DeviceConfig(input_device_id=1, output_device_id=0), transport=transport)
        assert transport.input.info.id == 1
        assert transport.output.info.id == 0

    def test_missing_input(self):
        with pytest.raises(NoSuchDevice):
            Device(transport=FakeTransport(inputs=[]))

    def test_missing_output_closes_opened_input(self):
        transport = FakeTransport(outputs=[])
        with pytest.raises(NoSuchDevice):
            Device(transport=transport)
        assert transport.input.closed

    def test_missing_id(self, transport):
        with pytest.raises(NoSuchDevice):
            Device(transport=transport, input_device_id=7)

    def test_busy(self):
        with pytest.raises(DeviceBusy):
            Device(transport=FakeTransport(busy=True))

    def test_failed_reset_closes_both_ports(self):
        transport = FakeTransport(write_error=TransportError("write failed"))
        with pytest.raises(DeviceBusy) as excinfo:
            Device(transport=transport)
        assert isinstance(excinfo.value.__cause__, TransportError)
        assert transport.input.closed
        assert transport.output.closed

    def test_unknown_option(self, transport):
        with pytest.raises(ConfigurationError):
            Device(transport=transport, colour="red")


class TestClose:
    """Test closing."""

    def test_close_without_ports(self, transport):
        Device(transport=transport, input=False, output=False).close()

    def test_close_then_io_not_allowed(self, device, transport):
        assert not device.closed
        device.close()
        assert device.closed
        assert transport.input.closed and transport.output.closed
        with pytest.raises(NoInputAllowed):
            device.read_pending_actions()
        with pytest.raises(NoOutputAllowed):
            device.change("mixer", Color.RED)

    def test_close_twice(self, device):
        device.close()
        device.close()
        assert device.closed

    def test_context_manager(self, transport):
        with Device(transport=transport) as device:
            assert not device.closed
        assert device.closed


class TestOutput:
    """Test LED output."""

    @pytest.mark.parametrize(
        "method,data2",
        [("reset", 0x00), ("flashing_on", 0x20), ("flashing_off", 0x21), ("flashing_auto", 0x28)],
    )
    def test_control_messages(self, device, transport, method, data2):
        getattr(device, method)()
        assert transport.output.written == [(0xB0, 0x00, data2)]

    @pytest.mark.parametrize("method", ["reset", "flashing_on", "flashing_off", "flashing_auto", "test_leds", "buffering_mode", "change_all"])
    def test_requires_output(self, transport, method):
        with pytest.raises(NoOutputAllowed):
            getattr(Device(transport=transport, output=False), method)()

    def test_test_leds_default_high(self, device, transport):
        device.test_leds()
        assert transport.output.written == [(0xB0, 0x00, 0x7F)]

    def test_test_leds_off_resets(self, device, transport):
        device.test_leds(0)
        assert transport.output.written == [(0xB0, 0x00, 0x00)]

    def test_change_grid(self, device, transport):
        device.change("grid", Color.RED, x=3, y=2)
        assert transport.output.written == [(0x90, 35, 15)]

    def test_change_identity_with_red_green(self, device, transport):
        device.change_led(GridButton(x=0, y=7), red="lo", green="med", mode="buffering")
        assert transport.output.written == [(0x90, 112, 33)]

    def test_change_control(self, device, transport):
        device.change("mixer", {"green": "hi"}, mode="flashing")
        assert transport.output.written == [(0xB0, 0x6F, 56)]

    def test_change_without_coordinates(self, device):
        with pytest.raises(InvalidCoordinates):
            device.change("grid", Color.RED, x=1)

    @pytest.mark.parametrize("x,y", [(-1, 0), (8, 0), (0, -1), (0, 8)])
    def test_change_out_of_range(self, device, x, y):
        with pytest.raises(InvalidCoordinates):
            device.change("grid", x=x, y=y)

    def test_change_invalid_brightness(self, device, transport):
        with pytest.raises(InvalidBrightness):
            device.change("up", red=4)
        assert transport.output.written == []

    def test_change_all(self, device, transport):
        device.change_all([0x11] * 40)
        written = transport.output.written
        assert len(written) == 41
        assert written[0] == (0xB0, 0x00, 0x01)
        assert written[1] == (0x92, 29, 29)
        assert written[-1] == (0x92, 12, 12)

    def test_buffering_mode(self, device, transport):
        device.buffering_mode(display_buffer=1, update_buffer=0, flashing=False)
        device.buffering_mode(flashing=True)
        assert transport.output.written == [(0xB0, 0x00, 0x21), (0xB0, 0x00, 0x28)]


class TestInput:
    """Test reading pending actions."""

    def test_nothing_pending(self, device):
        assert device.read_pending_actions() == []

    def test_multiple_actions(self, device, transport):
        transport.input.feed((0x90, 0, 127), timestamp=1)
        transport.input.feed((0xB0, 0x68, 0), timestamp=2)
        first, second = device.read_pending_actions()
        assert (first.timestamp, first.state, first.identity) == (1, ButtonState.DOWN, GridButton(x=0, y=0))
        assert (second.timestamp, second.state, second.type) == (2, ButtonState.UP, ButtonType.UP)

    def test_reads_at_most_16(self, device, transport):
        transport.input.feed(*[(0x90, 0x11, 127)] * 20)
        assert len(device.read_pending_actions()) == 16
        assert len(device.read_pending_actions()) == 4

    def test_unknown_messages_are_dropped(self, device, transport, caplog):
        transport.input.feed((0xB0, 0x10, 127), (0x90, 0x78, 127))
        actions = device.read_pending_actions()
        assert [a.type for a in actions] == [ButtonType.SCENE8]
        assert "Dropping MIDI message" in caplog.text

    def test_transport_errors_propagate(self, device, transport):
        transport.input.fail_with = TransportError("unplugged")
        with pytest.raises(TransportError):
            device.read_pending_actions()
