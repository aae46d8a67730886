# SPDX-FileCopyrightText: 2026 StateManager Developers
# SPDX-License-Identifier: Apache-2.0

"""
State records and the ordered registry of states.

A :class:`State` pairs a unique name with two callbacks: `tick`, run while the
state is active, and `advertise`, consulted during a transition scan with the
name of the active state. The :class:`Registry` keeps states in insertion order,
which is the order a transition scan visits them in.
"""


# type annotations
from __future__ import annotations
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Type

# standard libs
from dataclasses import dataclass, field

# public interface
__all__ = ['SENTINEL_NAME', 'TickFunction', 'AdvertiseFunction',
           'decline_tick', 'decline_advertise', 'State', 'Registry', ]


SENTINEL_NAME = 'dummyState'
"""Reserved name of the controller's sentinel state."""


TickFunction = Callable[[], bool]
AdvertiseFunction = Callable[[str], bool]


def decline_tick() -> bool:
    """Default tick (always fails)."""
    return False


def decline_advertise(active_name: str) -> bool:  # noqa: unused argument
    """Default advertise (never nominates)."""
    return False


@dataclass(eq=False)
class State:
    """A named state with `tick` and `advertise` callbacks."""

    name: str
    tick: TickFunction = field(default=decline_tick, repr=False)
    advertise: AdvertiseFunction = field(default=decline_advertise, repr=False)

    def __setattr__(self: State, key: str, value: Any) -> None:
        """Callbacks may be replaced but the name is fixed at creation."""
        if key == 'name' and 'name' in self.__dict__:
            raise AttributeError('Cannot rename state')
        super().__setattr__(key, value)

    def __eq__(self: State, other: Any) -> bool:
        """States are equal if their names are equal."""
        if not isinstance(other, State):
            return NotImplemented
        return self.name == other.name

    def __hash__(self: State) -> int:
        return hash(self.name)

    @classmethod
    def sentinel(cls: Type[State]) -> State:
        """The placeholder state used when nothing else is active."""
        return cls(SENTINEL_NAME)

    @property
    def is_sentinel(self: State) -> bool:
        return self.name == SENTINEL_NAME


class Registry:
    """Insertion-ordered collection of states with unique names."""

    __states: Dict[str, State]

    def __init__(self: Registry) -> None:
        self.__states = {}

    def add(self: Registry, state: State) -> bool:
        """Append `state` unless its name is already taken."""
        if state.name in self.__states:
            return False
        self.__states[state.name] = state
        return True

    def remove(self: Registry, name: str) -> Optional[State]:
        """Remove and return the state called `name` (None if absent)."""
        return self.__states.pop(name, None)

    def get(self: Registry, name: str) -> Optional[State]:
        """Look up state by `name` (None if absent)."""
        return self.__states.get(name)

    def names(self: Registry) -> Tuple[str, ...]:
        """State names in scan order."""
        return tuple(self.__states)

    def __contains__(self: Registry, name: Any) -> bool:
        return name in self.__states

    def __len__(self: Registry) -> int:
        return len(self.__states)

    def __iter__(self: Registry) -> Iterator[State]:
        """Iterate over a snapshot of the states in scan order."""
        return iter(tuple(self.__states.values()))

    def __repr__(self: Registry) -> str:
        return f'<Registry({", ".join(map(repr, self.__states))})>'
