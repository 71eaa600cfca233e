"""
Responder registration and error-isolated dispatch.

Responders are stored per button key and per button state, in registration
order. Grid registrations may be narrowed to single cells, columns or rows.
"""

import threading
from collections.abc import Iterable
from typing import Any, Callable, Optional, Union

from launchgrid.controls import (
    Action,
    ButtonState,
    ButtonType,
    GridButton,
    StateFilter,
)
from launchgrid.errors import InvalidCoordinates
from launchgrid.logging_config import get_logger

logger = get_logger(__name__)

# Callback type signatures
Responder = Callable[[Any, Action], None]
ErrorObserver = Callable[[Responder, Action, Exception], None]

# Keys: a ButtonType, or ("grid", x, y) with None meaning "any"
ResponderKey = Union[ButtonType, tuple[str, Optional[int], Optional[int]]]
GridRange = Union[int, range, Iterable[Union[int, range]], None]


def grid_positions(positions: GridRange) -> Optional[list[int]]:
    """
    Flatten an x or y selector into a list of positions.

    Accepts an int, a range, or an iterable of ints and ranges. Duplicates
    are removed, order is kept. None stays None ("any").

    Raises:
        InvalidCoordinates: Anything but integers 0-7
    """
    if positions is None:
        return None
    if isinstance(positions, (int, range)):
        positions = [positions]
    elif isinstance(positions, str) or not isinstance(positions, Iterable):
        raise InvalidCoordinates(f"grid positions must be integers 0-7, got {positions!r}")

    result: list[int] = []
    for pos in positions:
        for p in (pos if isinstance(pos, range) else [pos]):
            if not isinstance(p, int) or isinstance(p, bool):
                raise InvalidCoordinates(f"grid positions must be integers 0-7, got {p!r}")
            if p not in result:
                result.append(p)
    invalid = [p for p in result if not 0 <= p <= 7]
    if invalid:
        raise InvalidCoordinates(f"grid positions must be 0-7, got {invalid}")
    return result


def responder_keys(
    types: Union[str, ButtonType, Iterable[Union[str, ButtonType]], None],
    x: GridRange = None,
    y: GridRange = None,
) -> list[ResponderKey]:
    """
    Expand button names (plus optional grid selectors) into table keys.

    For "grid": x and y give single cells, only x gives whole columns, only
    y whole rows, neither the plain grid key. Selectors are ignored for all
    other button types.
    """
    if types is None:
        types = [ButtonType.ALL]
    elif isinstance(types, (str, ButtonType)):
        types = [types]

    keys: list[ResponderKey] = []
    for button in types:
        button_type = ButtonType(button)
        xs, ys = grid_positions(x), grid_positions(y)
        if button_type is ButtonType.GRID and (xs is not None or ys is not None):
            for xx in xs if xs is not None else [None]:
                for yy in ys if ys is not None else [None]:
                    keys.append(("grid", xx, yy))
        else:
            keys.append(button_type)
    return keys


class ResponderTable:
    """
    Maps button keys to ordered responder lists, one list per button state.

    Lookups never create entries. Dispatch copies the relevant lists under
    the lock and runs the callbacks without holding it, so responders may
    register or clear responders themselves.
    """

    def __init__(self, on_error: Optional[ErrorObserver] = None):
        """
        Args:
            on_error: Called with (callback, action, exception) whenever a
                responder raises; the error is logged either way
        """
        self._responders: dict[ResponderKey, dict[ButtonState, list[Responder]]] = {}
        self._lock = threading.RLock()
        self.on_error = on_error

    def register(
        self,
        types: Union[str, ButtonType, Iterable[Union[str, ButtonType]], None],
        state: Union[StateFilter, str],
        callback: Responder,
        exclusive: bool = False,
        x: GridRange = None,
        y: GridRange = None,
    ) -> None:
        """
        Register a responder.

        Args:
            types: One or more button names ("all", "grid", "mixer", ...)
            state: "down", "up" or "both"
            callback: Function(interaction, action) -> None
            exclusive: Remove other responders for the same keys and states first
            x: Column selector for grid registrations
            y: Row selector for grid registrations
        """
        states = StateFilter(state).states()
        keys = responder_keys(types, x, y)
        with self._lock:
            if exclusive:
                self._clear_keys(keys, states)
            for key in keys:
                per_state = self._responders.setdefault(key, {})
                for st in states:
                    per_state.setdefault(st, []).append(callback)
        logger.debug(
            f"Registered responder {getattr(callback, '__name__', repr(callback))} for "
            f"{_describe(keys)} ({StateFilter(state).value}{', exclusive' if exclusive else ''})",
        )

    def clear(
        self,
        types: Union[str, ButtonType, Iterable[Union[str, ButtonType]], None] = None,
        state: Union[StateFilter, str] = StateFilter.BOTH,
        x: GridRange = None,
        y: GridRange = None,
    ) -> None:
        """
        Remove responders.

        Args:
            types: Button names to clear; None clears every responder
                (note that "all" only clears the wildcard responders)
            state: "down", "up" or "both"
        """
        with self._lock:
            if types is None:
                self._responders.clear()
                logger.debug("Cleared all responders")
                return
            keys = responder_keys(types, x, y)
            self._clear_keys(keys, StateFilter(state).states())
        logger.debug(f"Cleared responders for {_describe(keys)} ({StateFilter(state).value})")

    def _clear_keys(self, keys: list[ResponderKey], states: tuple[ButtonState, ...]) -> None:
        for key in keys:
            per_state = self._responders.get(key)
            if per_state is None:
                continue
            for st in states:
                per_state.pop(st, None)
            if not per_state:
                del self._responders[key]

    def _lookup(self, key: ResponderKey, state: ButtonState) -> list[Responder]:
        return list(self._responders.get(key, {}).get(state, ()))

    def responders_for(self, action: Action) -> list[Responder]:
        """
        Responders for an action, in call order.

        Grid: exact cell, column, row, plain grid; then the "all" wildcard.
        Other buttons: the button's own responders, then "all".
        """
        state = action.state
        with self._lock:
            callbacks: list[Responder] = []
            if isinstance(action.identity, GridButton):
                x, y = action.identity.x, action.identity.y
                callbacks += self._lookup(("grid", x, y), state)
                callbacks += self._lookup(("grid", x, None), state)
                callbacks += self._lookup(("grid", None, y), state)
            if action.type is not ButtonType.ALL:
                callbacks += self._lookup(action.type, state)
            callbacks += self._lookup(ButtonType.ALL, state)
        return callbacks

    def dispatch(self, handle: Any, action: Action) -> int:
        """
        Call every matching responder with (handle, action).

        Returns:
            Number of responders that completed without raising
        """
        succeeded = 0
        for callback in self.responders_for(action):
            if self._safe_call(callback, handle, action):
                succeeded += 1
        return succeeded

    def _safe_call(self, callback: Responder, handle: Any, action: Action) -> bool:
        """Run one responder; log and report exceptions instead of propagating."""
        try:
            callback(handle, action)
            return True
        except Exception as e:
            callback_name = getattr(callback, "__name__", repr(callback))
            logger.exception(f"Error in responder '{callback_name}' for {action.type.value} {action.state.value}: {e}")
            if self.on_error is not None:
                try:
                    self.on_error(callback, action, e)
                except Exception as observer_error:
                    logger.exception(f"Error in responder error observer: {observer_error}")
            return False

    def counts(self) -> dict[str, int]:
        """Number of registered responders per state."""
        with self._lock:
            return {
                st.value: sum(len(per_state.get(st, ())) for per_state in self._responders.values())
                for st in ButtonState
            }

    def __len__(self) -> int:
        return sum(self.counts().values())


def _describe(keys: list[ResponderKey]) -> str:
    names = []
    for key in keys:
        if isinstance(key, ButtonType):
            names.append(key.value)
        else:
            _, x, y = key
            names.append(f"grid[{'*' if x is None else x},{'*' if y is None else y}]")
    return ", ".join(names)
