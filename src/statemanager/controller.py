# SPDX-FileCopyrightText: 2026 StateManager Developers
# SPDX-License-Identifier: Apache-2.0

"""
Finite state machine controller.

The controller owns an ordered registry of named states and designates one of
them as active. Each call to :meth:`Controller.drive` runs the active state's
`tick` callback; with `transition=True` it then scans the registry in
insertion order and activates the first state (other than the active one)
whose `advertise` callback accepts the name of the active state.

When nothing is active the controller falls back to a sentinel state named
``"dummyState"`` that never succeeds and never advertises. This name is
reserved and is rejected by every name-based operation.

Every failure is reported as a ``False`` return value; the controller does not
raise on its own. Exceptions raised by callbacks propagate unchanged.

Example:
    >>> machine = Controller()
    >>> machine.add('idle')
    True
    >>> machine.bind_tick('idle', lambda: True)
    True
    >>> machine.transition_to('idle')
    True
    >>> machine.drive()
    True

Warning:
    The controller is not thread-safe. Callbacks run inline on the calling
    thread and must not mutate the controller; such calls return False.
"""


# type annotations
from __future__ import annotations
from typing import Any, Iterator, Optional, Tuple

# standard libs
import contextlib

# internal libs
from statemanager.core.logging import Logger
from statemanager.core.exceptions import write_traceback
from statemanager.core.fsm import (SENTINEL_NAME, TickFunction, AdvertiseFunction,
                                   State, Registry)

# public interface
__all__ = ['Controller', ]

# initialize logger
log = Logger.with_name(__name__)


class Controller:
    """Registry of named states with a single active state."""

    __registry: Registry
    __sentinel: State
    __active: Optional[str] = None  # NOTE: None means the sentinel is active
    __engaged: bool = False

    def __init__(self: Controller) -> None:
        """Initialize with no states (sentinel is active)."""
        self.__registry = Registry()
        self.__sentinel = State.sentinel()

    @property
    def active_name(self: Controller) -> str:
        """Name of the currently active state."""
        return SENTINEL_NAME if self.__active is None else self.__active

    @property
    def names(self: Controller) -> Tuple[str, ...]:
        """State names in scan order (only the sentinel if there are none)."""
        return self.__registry.names() or (SENTINEL_NAME, )

    def __len__(self: Controller) -> int:
        """Number of user states."""
        return len(self.__registry)

    def __contains__(self: Controller, name: Any) -> bool:
        return isinstance(name, str) and name in self.__registry

    def __repr__(self: Controller) -> str:
        return f'<Controller(active={self.active_name!r}, states={list(self.names)!r})>'

    def add(self: Controller, name: str) -> bool:
        """
        Append a new state called `name` with default callbacks.

        Returns False if `name` is empty, reserved, or already present.
        """
        if not self.__check_available('add'):
            return False
        if not isinstance(name, str) or not name:
            log.warning(f'Cannot add state with invalid name ({name!r})')
            return False
        if name == SENTINEL_NAME:
            log.warning(f'Cannot add state with reserved name ({name})')
            return False
        if not self.__registry.add(State(name)):
            log.debug(f'State already exists ({name})')
            return False
        log.debug(f'Added state ({name})')
        return True

    def remove(self: Controller, name: str) -> bool:
        """
        Remove the state called `name`.

        If it was active the sentinel becomes active. Returns False if not found.
        """
        if not self.__check_available('remove') or self.__lookup(name) is None:
            return False
        self.__registry.remove(name)
        log.debug(f'Removed state ({name})')
        if self.__active == name:
            self.__active = None
            log.debug(f'Removed active state ({name}) -> {SENTINEL_NAME}')
        return True

    def bind_tick(self: Controller, name: str, fn: TickFunction) -> bool:
        """Replace the tick callback of state `name`."""
        return self.__bind('tick', name, fn)

    def bind_advertise(self: Controller, name: str, fn: AdvertiseFunction) -> bool:
        """Replace the advertise callback of state `name`."""
        return self.__bind('advertise', name, fn)

    def transition_to(self: Controller, name: str) -> bool:
        """Make state `name` active (returns False if not found)."""
        if not self.__check_available('transition_to'):
            return False
        state = self.__lookup(name)
        if state is None:
            return False
        self.__switch(state)
        return True

    def transition(self: Controller) -> bool:
        """
        Activate the first state (other than the active one) that advertises.

        Returns False if no state advertised (the active state is unchanged).
        """
        if not self.__check_available('transition'):
            return False
        with self.__engage():
            return self.__scan()

    def drive(self: Controller, transition: bool = False) -> bool:
        """
        Run the active state's tick and return its result.

        If `transition` is True, a transition scan follows the tick (see
        :meth:`transition`). The tick result is returned in either case.
        """
        if not self.__check_available('drive'):
            return False
        with self.__engage():
            state = self.__active_state()
            log.trace(f'Tick ({state.name})')
            success = self.__invoke(state.tick)
            if transition:
                self.__scan()
            return success

    def __active_state(self: Controller) -> State:
        if self.__active is None:
            return self.__sentinel
        return self.__registry.get(self.__active)

    def __scan(self: Controller) -> bool:
        """Activate first advertiser in scan order, if any."""
        current = self.active_name
        for state in self.__registry:
            if state.name == current:
                continue
            if self.__invoke(state.advertise, current):
                log.trace(f'Advertised ({state.name}) from {current}')
                self.__switch(state)
                return True
        log.trace(f'No state advertised from {current}')
        return False

    def __switch(self: Controller, state: State) -> None:
        log.debug(f'Transition {self.active_name} -> {state.name}')
        self.__active = state.name

    def __lookup(self: Controller, name: str) -> Optional[State]:
        """Find user state called `name` (never the sentinel)."""
        if not isinstance(name, str) or name == SENTINEL_NAME:
            return None
        return self.__registry.get(name)

    def __bind(self: Controller, slot: str, name: str, fn: Any) -> bool:
        if not self.__check_available(f'bind_{slot}'):
            return False
        state = self.__lookup(name)
        if state is None:
            return False
        if not callable(fn):
            log.warning(f'Cannot bind {slot} for state ({name}): {fn!r} is not callable')
            return False
        setattr(state, slot, fn)
        log.debug(f'Bound {slot} for state ({name})')
        return True

    def __check_available(self: Controller, operation: str) -> bool:
        """Mutations are not permitted from within callbacks."""
        if self.__engaged:
            log.warning(f'Rejected {operation}() from within a callback')
            return False
        return True

    @contextlib.contextmanager
    def __engage(self: Controller) -> Iterator[None]:
        self.__engaged = True
        try:
            yield
        finally:
            self.__engaged = False

    def __invoke(self: Controller, fn: Any, *args: Any) -> bool:
        """Call `fn` and log unexpected exceptions before re-raising."""
        try:
            return bool(fn(*args))
        except Exception as error:
            # NOTE: Only non-RuntimeError instances are "unexpected"
            if not isinstance(error, RuntimeError):
                log.critical(f'Uncaught exception from {fn!r}')
                write_traceback(error, logger=log, module=__name__)
            raise
