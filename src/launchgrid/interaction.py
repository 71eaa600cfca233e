"""
Interaction - poll a Launchpad and dispatch button actions to responders.

A background reader thread polls the device for pending actions and hands
each action to its own thread, so a slow responder never holds up the poll
loop or the other actions of the same poll.
"""

import threading
from collections.abc import Iterable
from typing import Any, Callable, Optional, Union

from launchgrid.callbacks import ErrorObserver, GridRange, Responder, ResponderTable
from launchgrid.config import InteractionConfig, build_config
from launchgrid.controls import Action, ButtonState, ButtonType, StateFilter, button_identity
from launchgrid.device import Device
from launchgrid.errors import CommunicationError, LaunchpadError, NoInputAllowed
from launchgrid.logging_config import get_logger
from launchgrid.midi_io import TransportError

logger = get_logger(__name__)

ACTION_JOIN_TIMEOUT = 2.0

ButtonTypes = Union[str, ButtonType, Iterable[Union[str, ButtonType]], None]


class Interaction:
    """
    Event loop for a Launchpad.

    Example:
        >>> interaction = Interaction()
        >>> @interaction.response_to("grid", "down")
        ... def light(interaction, action):
        ...     interaction.device.change(action.identity, Color.RED)
        >>> @interaction.response_to("mixer", "up")
        ... def quit(interaction, action):
        ...     interaction.stop()
        >>> interaction.start()
    """

    def __init__(
        self,
        device: Optional[Device] = None,
        config: Optional[InteractionConfig] = None,
        transport: Any = None,
        on_error: Optional[ErrorObserver] = None,
        **overrides: Any,
    ):
        """
        Initialize the interaction.

        Args:
            device: Device to use; created with input and output on start() if None
            config: Device selection for the created device and poll latency
            transport: Transport for the created device (mido backed if None)
            on_error: Called with (callback, action, exception) when a responder raises
            **overrides: InteractionConfig fields overriding ``config``
        """
        self._config: InteractionConfig = build_config(InteractionConfig, config, overrides)
        self._device = device
        self._transport = transport
        self._responders = ResponderTable(on_error=on_error)

        self._active = False
        self._closed = False
        self._wakeup = threading.Event()
        self._reader_thread: Optional[threading.Thread] = None
        self._action_threads: set[threading.Thread] = set()
        self._threads_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()
        self._error: Optional[BaseException] = None

    @property
    def device(self) -> Optional[Device]:
        """The device, None until start() creates one."""
        return self._device

    @property
    def active(self) -> bool:
        return self._active

    @property
    def latency(self) -> float:
        return self._config.latency

    @property
    def responders(self) -> ResponderTable:
        return self._responders

    @property
    def closed(self) -> bool:
        return self._closed

    # Lifecycle

    def start(self, detached: bool = False) -> None:
        """
        Start polling the device.

        Args:
            detached: Return immediately instead of blocking until the
                interaction is stopped

        Raises:
            NoInputAllowed: The interaction has been closed
            CommunicationError: The device failed while polling (blocking
                mode), or a previous detached loop failed and stop() was
                never called to report it
        """
        with self._lifecycle_lock:
            if self._closed:
                raise NoInputAllowed("interaction has been closed")

            reader = self._reader_thread
            if reader is not None and reader.is_alive():
                logger.warning("Interaction is already running")
            else:
                self._raise_pending_error()
                if self._device is None:
                    self._device = Device(self._config.device_config(), transport=self._transport)

                self._active = True
                self._wakeup.clear()
                reader = threading.Thread(
                    target=self._read_loop,
                    daemon=True,
                    name="LaunchpadReaderThread",
                )
                reader.start()
                # Only started threads are published, stop() may join any it sees
                self._reader_thread = reader
                logger.debug(f"Interaction started ({'detached' if detached else 'blocking'})")

        if not detached:
            reader.join()
            self._raise_pending_error()

    def stop(self) -> None:
        """
        Stop polling and wait for the reader thread and in-flight actions.

        Safe to call at any time, including from a responder. Re-raises an
        error that ended a detached poll loop.
        """
        with self._lifecycle_lock:
            self._active = False
            self._wakeup.set()
            reader = self._reader_thread

        if reader is not None and reader is not threading.current_thread():
            reader.join()
            with self._lifecycle_lock:
                # A concurrent start() may have published a new reader meanwhile
                if self._reader_thread is reader:
                    self._reader_thread = None

        self._join_action_threads()
        self._raise_pending_error()

    def close(self) -> None:
        """Stop and close the device; the interaction can't be started again."""
        try:
            self.stop()
        finally:
            if self._device is not None:
                self._device.close()
            self._closed = True

    def _read_loop(self) -> None:
        """Background thread: poll actions, spawn one thread per action."""
        logger.debug("Reader loop started")
        try:
            while self._active:
                for action in self._device.read_pending_actions():
                    self._spawn_action(action)
                if self._config.latency:
                    self._sleep()
        except TransportError as e:
            logger.critical(f"Could not read from device, stopping interaction: {e}")
            self._error = CommunicationError(e)
            self._error.__cause__ = e
        except Exception as e:
            logger.critical(f"Error causing action reading to stop: {e!r}")
            self._error = e
        finally:
            self._active = False
            try:
                self._device.reset()
            except (LaunchpadError, TransportError) as e:
                logger.error(f"Could not reset device: {e}")
            logger.debug("Reader loop stopped")

    def _sleep(self) -> None:
        """Wait for the poll latency; stop() cuts the wait short."""
        self._wakeup.wait(self._config.latency)

    def _spawn_action(self, action: Action) -> None:
        thread = threading.Thread(
            target=self._run_action,
            args=(action,),
            daemon=True,
            name=f"LaunchpadAction-{action.type.value}",
        )
        with self._threads_lock:
            self._action_threads.add(thread)
        thread.start()

    def _run_action(self, action: Action) -> None:
        try:
            self.respond_to_action(action)
        except Exception as e:
            logger.exception(f"Error when responding to action {action}: {e}")
        finally:
            with self._threads_lock:
                self._action_threads.discard(threading.current_thread())

    def _join_action_threads(self) -> None:
        current = threading.current_thread()
        with self._threads_lock:
            threads = [t for t in self._action_threads if t is not current]
        for thread in threads:
            thread.join(timeout=ACTION_JOIN_TIMEOUT)
            if thread.is_alive():
                logger.warning(f"Action thread {thread.name} did not finish within {ACTION_JOIN_TIMEOUT}s")

    def _raise_pending_error(self) -> None:
        error, self._error = self._error, None
        if error is not None:
            raise error

    # Responders

    def response_to(
        self,
        types: ButtonTypes = ButtonType.ALL,
        state: Union[StateFilter, str] = StateFilter.BOTH,
        callback: Optional[Responder] = None,
        exclusive: bool = False,
        x: GridRange = None,
        y: GridRange = None,
    ) -> Union[Responder, Callable[[Responder], Responder]]:
        """
        Register a responder, directly or as a decorator.

        Args:
            types: Button name(s): "all", "grid", "up", ..., "mixer", "scene1"-"scene8"
            state: "down", "up" or "both"
            callback: Function(interaction, action) -> None; omit to use as decorator
            exclusive: Replace existing responders for the same buttons and states
            x: Restrict grid responders to column(s) (int, range or iterable)
            y: Restrict grid responders to row(s) (int, range or iterable)
        """
        if callback is None:

            def decorator(func: Responder) -> Responder:
                self._responders.register(types, state, func, exclusive=exclusive, x=x, y=y)
                return func

            return decorator

        self._responders.register(types, state, callback, exclusive=exclusive, x=x, y=y)
        return callback

    def no_response_to(
        self,
        types: ButtonTypes = None,
        state: Union[StateFilter, str] = StateFilter.BOTH,
        x: GridRange = None,
        y: GridRange = None,
    ) -> None:
        """Remove responders; without types every responder is removed."""
        self._responders.clear(types, state, x=x, y=y)

    def respond_to(
        self,
        button: Union[str, ButtonType],
        state: Union[ButtonState, str],
        x: Optional[int] = None,
        y: Optional[int] = None,
    ) -> None:
        """
        Simulate a button action and dispatch it right away, in this thread.

        Raises:
            InvalidCoordinates: "grid" without valid x/y
        """
        action = Action(state=ButtonState(state), identity=button_identity(button, x, y))
        self.respond_to_action(action)

    def respond_to_action(self, action: Action) -> None:
        """Dispatch an action to all matching responders."""
        logger.debug(f"Responding to {action.type.value} {action.state.value} (x={action.x}, y={action.y})")
        self._responders.dispatch(self, action)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
