"""Pytest fixtures for tests."""

import threading

import pytest

from launchgrid.controls import RawMessage
from launchgrid.device import Device
from launchgrid.midi_io import PortInfo, TransportError


class FakeInput:
    """In-memory input handle; queue messages with feed()."""

    def __init__(self, info):
        self.info = info
        self.pending = []
        self.closed = False
        self.fail_with = None
        self.reads = 0
        self._lock = threading.Lock()

    def feed(self, *triples, timestamp=0):
        with self._lock:
            for status, data1, data2 in triples:
                self.pending.append(RawMessage(status=status, data1=data1, data2=data2, timestamp=timestamp))

    def read(self, max_count):
        self.reads += 1
        if self.fail_with is not None:
            raise self.fail_with
        if self.closed:
            raise TransportError("closed")
        with self._lock:
            batch, self.pending = self.pending[:max_count], self.pending[max_count:]
        return batch

    def close(self):
        self.closed = True


class FakeOutput:
    """In-memory output handle recording written byte triples."""

    def __init__(self, info):
        self.info = info
        self.written = []
        self.closed = False
        self.fail_with = None
        self._lock = threading.Lock()

    def write(self, messages):
        if self.fail_with is not None:
            raise self.fail_with
        if self.closed:
            raise TransportError("closed")
        with self._lock:
            self.written.extend(message.as_bytes() for message in messages)

    def close(self):
        self.closed = True


class FakeTransport:
    """Transport listing one Launchpad unless told otherwise."""

    def __init__(self, inputs=None, outputs=None, busy=False, write_error=None):
        self.inputs = inputs if inputs is not None else [PortInfo(id=0, name="Launchpad")]
        self.outputs = outputs if outputs is not None else [PortInfo(id=0, name="Launchpad")]
        self.busy = busy
        self.write_error = write_error
        self.opened_inputs = []
        self.opened_outputs = []

    def list_input_devices(self):
        return list(self.inputs)

    def list_output_devices(self):
        return list(self.outputs)

    def open_input(self, device_id):
        if self.busy:
            raise TransportError("Host error")
        info = next(info for info in self.inputs if info.id == device_id)
        handle = FakeInput(info)
        self.opened_inputs.append(handle)
        return handle

    def open_output(self, device_id):
        if self.busy:
            raise TransportError("Host error")
        info = next(info for info in self.outputs if info.id == device_id)
        handle = FakeOutput(info)
        handle.fail_with = self.write_error
        self.opened_outputs.append(handle)
        return handle

    @property
    def input(self):
        return self.opened_inputs[-1]

    @property
    def output(self):
        return self.opened_outputs[-1]


@pytest.fixture
def transport():
    """Fake transport with a single Launchpad."""
    return FakeTransport()


@pytest.fixture
def device(transport):
    """Device with input and output on the fake transport, reset message cleared."""
    device = Device(transport=transport)
    transport.output.written.clear()
    yield device
    device.close()
