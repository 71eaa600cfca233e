"""
MIDI transport built on mido.

Provides port discovery and thin, thread-safe input/output handles exchanging
RawMessage triples. Reads never block: they return whatever is pending.
"""

import threading
import time
from collections.abc import Iterable
from typing import Optional

import mido
from pydantic import BaseModel

from launchgrid.controls import RawMessage
from launchgrid.logging_config import get_logger

logger = get_logger(__name__)


class TransportError(IOError):
    """Raised when the MIDI backend fails to open, read or write a port."""

    pass


class PortInfo(BaseModel):
    """A MIDI port as listed by the backend."""

    id: int
    name: str

    model_config = {"frozen": True}


class InputHandle:
    """
    Open MIDI input port.

    Timestamps of read messages are milliseconds since the port was opened.
    """

    def __init__(self, port: mido.ports.BaseInput, info: PortInfo):
        self._port: Optional[mido.ports.BaseInput] = port
        self._info = info
        self._opened_at = time.monotonic()
        self._port_lock = threading.Lock()

    @property
    def info(self) -> PortInfo:
        return self._info

    @property
    def closed(self) -> bool:
        return self._port is None

    def _timestamp(self) -> int:
        return int((time.monotonic() - self._opened_at) * 1000)

    def read(self, max_count: int) -> list[RawMessage]:
        """
        Read up to max_count pending messages without blocking.

        Messages that are not 3-byte channel messages (sysex, clock, ...)
        are skipped.

        Raises:
            TransportError: Port closed or backend failure
        """
        messages: list[RawMessage] = []
        with self._port_lock:
            if self._port is None:
                raise TransportError(f"MIDI input port is closed: {self._info.name}")
            try:
                while len(messages) < max_count:
                    msg = self._port.poll()
                    if msg is None:
                        break
                    data = msg.bytes()
                    if len(data) != 3:
                        logger.debug(f"Skipping MIDI message: {msg}")
                        continue
                    messages.append(
                        RawMessage(status=data[0], data1=data[1], data2=data[2], timestamp=self._timestamp()),
                    )
            except Exception as e:
                raise TransportError(f"Failed to read from {self._info.name}: {e}") from e

        if messages:
            logger.debug(f"Received {len(messages)} MIDI message(s) from {self._info.name}")
        return messages

    def close(self) -> None:
        with self._port_lock:
            if self._port is None:
                return
            try:
                self._port.close()
                logger.info(f"Closed MIDI input port: {self._info.name}")
            except Exception as e:
                logger.error(f"Error closing input port: {e}")
            finally:
                self._port = None


class OutputHandle:
    """
    Open MIDI output port.

    Each write() call is sent under a lock, so concurrent writers never
    interleave their batches.
    """

    def __init__(self, port: mido.ports.BaseOutput, info: PortInfo):
        self._port: Optional[mido.ports.BaseOutput] = port
        self._info = info
        self._port_lock = threading.Lock()

    @property
    def info(self) -> PortInfo:
        return self._info

    @property
    def closed(self) -> bool:
        return self._port is None

    def write(self, messages: Iterable[RawMessage]) -> None:
        """
        Send a batch of messages.

        Raises:
            TransportError: Port closed or backend failure
        """
        with self._port_lock:
            if self._port is None:
                raise TransportError(f"MIDI output port is closed: {self._info.name}")
            try:
                for message in messages:
                    self._port.send(mido.Message.from_bytes(list(message.as_bytes())))
                    logger.debug(f"Sent MIDI message: {message.as_bytes()}")
            except Exception as e:
                raise TransportError(f"Failed to write to {self._info.name}: {e}") from e

    def close(self) -> None:
        with self._port_lock:
            if self._port is None:
                return
            try:
                self._port.close()
                logger.info(f"Closed MIDI output port: {self._info.name}")
            except Exception as e:
                logger.error(f"Error closing output port: {e}")
            finally:
                self._port = None


class MidoTransport:
    """
    Port discovery and opening through mido's default backend (python-rtmidi).

    Port ids are positions in mido's port name lists.
    """

    def list_input_devices(self) -> list[PortInfo]:
        try:
            names = mido.get_input_names()
        except Exception as e:
            logger.error(f"Failed to list input ports: {e}")
            return []
        return [PortInfo(id=i, name=name) for i, name in enumerate(names)]

    def list_output_devices(self) -> list[PortInfo]:
        try:
            names = mido.get_output_names()
        except Exception as e:
            logger.error(f"Failed to list output ports: {e}")
            return []
        return [PortInfo(id=i, name=name) for i, name in enumerate(names)]

    def open_input(self, device_id: int) -> InputHandle:
        """
        Open an input port by id.

        Raises:
            LookupError: No port with this id
            TransportError: Backend refused to open the port
        """
        info = _lookup(self.list_input_devices(), device_id, "input")
        try:
            port = mido.open_input(info.name)
        except Exception as e:
            raise TransportError(f"Failed to open MIDI input {info.name}: {e}") from e
        logger.info(f"Opened MIDI input port: {info.name}")
        return InputHandle(port, info)

    def open_output(self, device_id: int) -> OutputHandle:
        """
        Open an output port by id.

        Raises:
            LookupError: No port with this id
            TransportError: Backend refused to open the port
        """
        info = _lookup(self.list_output_devices(), device_id, "output")
        try:
            port = mido.open_output(info.name)
        except Exception as e:
            raise TransportError(f"Failed to open MIDI output {info.name}: {e}") from e
        logger.info(f"Opened MIDI output port: {info.name}")
        return OutputHandle(port, info)


def _lookup(ports: list[PortInfo], device_id: int, kind: str) -> PortInfo:
    for info in ports:
        if info.id == device_id:
            return info
    raise LookupError(f"No MIDI {kind} port with id {device_id}")


def find_port(ports: Iterable[PortInfo], name: str) -> Optional[PortInfo]:
    """
    Find a port by device name.

    Exact matches win; otherwise the first port whose name starts with the
    device name (backends append client and port numbers, e.g.
    "Launchpad:Launchpad MIDI 1 20:0").
    """
    ports = list(ports)
    for info in ports:
        if info.name == name:
            return info
    for info in ports:
        if info.name.startswith(name):
            return info
    return None
