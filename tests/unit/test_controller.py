# This program is free software: you can redistribute it and/or modify it under the
# terms of the Apache License (v2.0) as published by the Apache Software Foundation.
#
# This program is distributed in the hope that it will be useful, but WITHOUT ANY
# WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS FOR A
# PARTICULAR PURPOSE. See the Apache License for more details.
#
# You should have received a copy of the Apache License along with this program.
# If not, see <https://www.apache.org/licenses/LICENSE-2.0>.

"""Unit tests for state machine controller."""


# type annotations
from typing import List

# standard libs
import logging

# external libs
import pytest

# internal libs
from statemanager import Controller, SENTINEL_NAME
from statemanager import controller as controller_module


def always(active: str) -> bool:
    return True


@pytest.fixture
def machine() -> Controller:
    return Controller()


@pytest.fixture
def ab_machine() -> Controller:
    """Two states that always advertise."""
    machine = Controller()
    for name in ('A', 'B'):
        machine.add(name)
        machine.bind_advertise(name, always)
    return machine


class TestRegistration:
    """Add, remove, and bind operations."""

    def test_initial(self, machine: Controller) -> None:
        assert machine.active_name == SENTINEL_NAME
        assert machine.names == (SENTINEL_NAME, )
        assert len(machine) == 0

    def test_add(self, machine: Controller) -> None:
        assert machine.add('A') is True
        assert machine.add('B') is True
        assert machine.names == ('A', 'B')
        assert 'A' in machine
        assert len(machine) == 2
        assert machine.active_name == SENTINEL_NAME

    def test_add_duplicate(self, machine: Controller) -> None:
        assert machine.add('A') is True
        machine.bind_tick('A', lambda: True)
        assert machine.add('A') is False
        assert machine.names == ('A', )
        machine.transition_to('A')
        assert machine.drive() is True  # original state kept

    def test_add_reserved(self, machine: Controller) -> None:
        assert machine.add(SENTINEL_NAME) is False
        assert machine.names == (SENTINEL_NAME, )
        assert len(machine) == 0

    @pytest.mark.parametrize('name', ['', None, 42])
    def test_add_invalid(self, machine: Controller, name) -> None:
        assert machine.add(name) is False
        assert len(machine) == 0

    def test_remove_missing(self, machine: Controller) -> None:
        assert machine.remove('A') is False
        assert machine.remove(SENTINEL_NAME) is False

    def test_remove_preserves_order(self, machine: Controller) -> None:
        for name in ('A', 'B', 'C'):
            machine.add(name)
        machine.transition_to('C')
        assert machine.remove('B') is True
        assert machine.names == ('A', 'C')
        assert machine.active_name == 'C'

    def test_remove_active(self, machine: Controller) -> None:
        machine.add('A')
        machine.add('B')
        machine.bind_tick('A', lambda: True)
        machine.transition_to('A')
        assert machine.remove('A') is True
        assert machine.active_name == SENTINEL_NAME
        assert machine.drive() is False
        assert machine.names == ('B', )

    def test_remove_last(self, machine: Controller) -> None:
        machine.add('A')
        machine.transition_to('A')
        assert machine.remove('A') is True
        assert machine.names == (SENTINEL_NAME, )
        assert machine.active_name == SENTINEL_NAME

    def test_readd_after_remove_uses_defaults(self, machine: Controller) -> None:
        machine.add('A')
        machine.bind_tick('A', lambda: True)
        machine.remove('A')
        machine.add('A')
        machine.transition_to('A')
        assert machine.drive() is False

    def test_bind_missing(self, machine: Controller) -> None:
        assert machine.bind_tick('A', lambda: True) is False
        assert machine.bind_advertise('A', always) is False

    def test_bind_reserved(self, machine: Controller) -> None:
        assert machine.bind_tick(SENTINEL_NAME, lambda: True) is False
        assert machine.bind_advertise(SENTINEL_NAME, always) is False
        assert machine.drive() is False

    def test_bind_not_callable(self, machine: Controller) -> None:
        machine.add('A')
        assert machine.bind_tick('A', True) is False
        assert machine.bind_advertise('A', 'yes') is False

    def test_bind_tick_is_local(self, machine: Controller) -> None:
        machine.add('A')
        machine.add('B')
        machine.bind_tick('B', lambda: True)
        machine.transition_to('B')
        assert machine.bind_tick('A', lambda: True) is True
        assert machine.active_name == 'B'
        assert machine.names == ('A', 'B')
        machine.bind_tick('B', lambda: False)
        assert machine.drive() is False
        machine.transition_to('A')
        assert machine.drive() is True

    def test_repr(self, machine: Controller) -> None:
        machine.add('A')
        assert repr(machine) == "<Controller(active='dummyState', states=['A'])>"

    def test_contains_rejects_sentinel(self, machine: Controller) -> None:
        assert SENTINEL_NAME not in machine
        assert None not in machine


class TestTransition:
    """Explicit and advertised transitions."""

    def test_transition_to(self, machine: Controller) -> None:
        machine.add('A')
        assert machine.transition_to('A') is True
        assert machine.active_name == 'A'
        assert machine.transition_to('A') is True

    def test_transition_to_missing(self, machine: Controller) -> None:
        machine.add('A')
        machine.transition_to('A')
        assert machine.transition_to('B') is False
        assert machine.active_name == 'A'

    def test_transition_to_sentinel(self, machine: Controller) -> None:
        machine.add('A')
        machine.transition_to('A')
        assert machine.transition_to(SENTINEL_NAME) is False
        assert machine.active_name == 'A'

    def test_transition_empty(self, machine: Controller) -> None:
        assert machine.transition() is False
        assert machine.active_name == SENTINEL_NAME

    def test_transition_no_advertiser(self, machine: Controller) -> None:
        machine.add('A')
        assert machine.transition() is False
        assert machine.active_name == SENTINEL_NAME

    def test_first_match_wins(self, ab_machine: Controller) -> None:
        assert ab_machine.transition() is True
        assert ab_machine.active_name == 'A'
        assert ab_machine.transition() is True
        assert ab_machine.active_name == 'B'
        assert ab_machine.transition() is True
        assert ab_machine.active_name == 'A'

    def test_later_advertisers_not_consulted(self, machine: Controller) -> None:
        consulted: List[str] = []

        def advertise(name: str, result: bool):
            def predicate(active: str) -> bool:
                consulted.append(name)
                return result
            return predicate

        for name, result in [('A', False), ('B', True), ('C', True)]:
            machine.add(name)
            machine.bind_advertise(name, advertise(name, result))
        assert machine.transition() is True
        assert machine.active_name == 'B'
        assert consulted == ['A', 'B']

    def test_advertise_receives_active_name(self, machine: Controller) -> None:
        received: List[str] = []
        machine.add('A')
        machine.add('B')
        machine.bind_advertise('B', lambda active: received.append(active) or active == 'A')
        assert machine.transition() is False
        machine.transition_to('A')
        assert machine.transition() is True
        assert received == [SENTINEL_NAME, 'A']
        assert machine.active_name == 'B'

    def test_no_self_election(self, machine: Controller) -> None:
        consulted: List[str] = []
        machine.add('A')
        machine.bind_advertise('A', lambda active: consulted.append(active) or True)
        machine.transition_to('A')
        assert machine.transition() is False
        assert machine.active_name == 'A'
        assert consulted == []  # active state is skipped without asking

    def test_deterministic(self) -> None:
        def build() -> Controller:
            machine = Controller()
            for name in ('A', 'B', 'C'):
                machine.add(name)
            machine.bind_advertise('B', lambda active: active != 'C')
            machine.bind_advertise('C', always)
            return machine
        outcomes = []
        for _ in range(3):
            machine = build()
            outcomes.append([(machine.transition(), machine.active_name) for _ in range(4)])
        assert outcomes[0] == outcomes[1] == outcomes[2]
        assert outcomes[0] == [(True, 'B'), (True, 'C'), (False, 'C'), (False, 'C')]

    def test_advertise_result_coerced(self, machine: Controller) -> None:
        machine.add('A')
        machine.bind_advertise('A', lambda active: 1)
        assert machine.transition() is True


class TestDrive:
    """Tick with and without transition."""

    def test_empty(self, machine: Controller) -> None:
        assert machine.drive() is False
        assert machine.drive(True) is False
        assert machine.active_name == SENTINEL_NAME

    def test_single_state(self, machine: Controller) -> None:
        machine.add('A')
        machine.bind_tick('A', lambda: True)
        machine.transition_to('A')
        assert machine.drive(False) is True
        assert machine.active_name == 'A'
        assert machine.drive(True) is True
        assert machine.active_name == 'A'

    def test_drive_without_transition_ignores_advertisers(self, machine: Controller) -> None:
        machine.add('A')
        machine.bind_advertise('A', always)
        assert machine.drive() is False
        assert machine.active_name == SENTINEL_NAME

    def test_tick_before_scan(self, machine: Controller) -> None:
        events: List[str] = []
        machine.add('A')
        machine.add('B')
        machine.bind_tick('A', lambda: events.append('tick A') or False)
        machine.bind_tick('B', lambda: events.append('tick B') or True)
        machine.bind_advertise('B', lambda active: events.append('advertise B') or True)
        machine.transition_to('A')
        assert machine.drive(transition=True) is False
        assert machine.active_name == 'B'
        assert events == ['tick A', 'advertise B']

    def test_tick_result_coerced(self, machine: Controller) -> None:
        machine.add('A')
        machine.bind_tick('A', lambda: 'ok')
        machine.transition_to('A')
        assert machine.drive() is True

    def test_shared_counter(self, machine: Controller) -> None:
        shared = {'i': 0}
        machine.add('A')
        machine.bind_tick('A', lambda: shared['i'] == 1)
        machine.bind_advertise('A', always)
        assert machine.drive(True) is False
        assert machine.active_name == 'A'
        shared['i'] = 1
        assert machine.drive(True) is True
        assert machine.active_name == 'A'


class TestReentrancy:
    """Callbacks cannot mutate the controller."""

    def test_mutation_from_tick_rejected(self, machine: Controller) -> None:
        results = {}

        def tick() -> bool:
            results['add'] = machine.add('B')
            results['remove'] = machine.remove('A')
            results['bind'] = machine.bind_tick('A', lambda: False)
            results['transition_to'] = machine.transition_to('A')
            results['transition'] = machine.transition()
            results['drive'] = machine.drive()
            results['active'] = machine.active_name
            return True

        machine.add('A')
        machine.bind_tick('A', tick)
        machine.transition_to('A')
        assert machine.drive() is True
        assert results == {'add': False, 'remove': False, 'bind': False, 'transition_to': False,
                           'transition': False, 'drive': False, 'active': 'A'}
        assert machine.names == ('A', )

    def test_mutation_from_advertise_rejected(self, machine: Controller) -> None:
        results = []

        def advertise(active: str) -> bool:
            results.append(machine.remove('A'))
            results.append(machine.add('C'))
            return True

        machine.add('A')
        machine.add('B')
        machine.bind_advertise('B', advertise)
        assert machine.transition() is True
        assert results == [False, False]
        assert machine.names == ('A', 'B')
        assert machine.active_name == 'B'

    def test_rejection_logged(self, machine: Controller, caplog: pytest.LogCaptureFixture) -> None:
        machine.add('A')
        machine.bind_tick('A', lambda: machine.add('B'))
        machine.transition_to('A')
        with caplog.at_level(logging.WARNING, logger='statemanager'):
            assert machine.drive() is False
        assert 'Rejected add() from within a callback' in caplog.text

    def test_usable_after_callback_error(self, machine: Controller) -> None:
        def tick() -> bool:
            raise RuntimeError('tick failed')

        machine.add('A')
        machine.bind_tick('A', tick)
        machine.transition_to('A')
        with pytest.raises(RuntimeError, match='tick failed'):
            machine.drive()
        assert machine.add('B') is True
        assert machine.bind_tick('A', lambda: True) is True
        assert machine.drive() is True


class TestCallbackErrors:
    """Exceptions from callbacks propagate."""

    def test_runtime_error_propagates(self, machine: Controller, monkeypatch: pytest.MonkeyPatch) -> None:
        written = []
        monkeypatch.setattr(controller_module, 'write_traceback', lambda *args, **kwargs: written.append(args))

        def advertise(active: str) -> bool:
            raise RuntimeError('advertise failed')

        machine.add('A')
        machine.bind_advertise('A', advertise)
        with pytest.raises(RuntimeError):
            machine.transition()
        assert written == []
        assert machine.active_name == SENTINEL_NAME

    def test_unexpected_error_traceback_written(self, machine: Controller,
                                                monkeypatch: pytest.MonkeyPatch) -> None:
        written = []
        monkeypatch.setattr(controller_module, 'write_traceback', lambda exc, **kwargs: written.append(exc))
        machine.add('A')
        machine.bind_tick('A', lambda: {}['missing'])
        machine.transition_to('A')
        with pytest.raises(KeyError):
            machine.drive(transition=True)
        assert len(written) == 1
        assert isinstance(written[0], KeyError)
        assert machine.active_name == 'A'


class TestScenarios:
    """End-to-end scenarios."""

    def test_remove_then_rescan(self, ab_machine: Controller) -> None:
        ab_machine.transition()
        ab_machine.transition()
        assert ab_machine.active_name == 'B'
        assert ab_machine.remove('B') is True
        assert ab_machine.active_name == SENTINEL_NAME
        assert ab_machine.names == ('A', )
        assert ab_machine.transition() is True
        assert ab_machine.active_name == 'A'
        assert ab_machine.remove('A') is True
        assert ab_machine.names == (SENTINEL_NAME, )
        assert ab_machine.active_name == SENTINEL_NAME
        assert ab_machine.drive(True) is False
        assert ab_machine.active_name == SENTINEL_NAME

    def test_invariants_over_sequence(self, machine: Controller) -> None:
        operations = [
            ('add', 'A'), ('add', 'B'), ('add', 'A'), ('transition_to', 'B'),
            ('remove', 'A'), ('add', 'C'), ('transition', None), ('remove', 'C'),
            ('remove', 'B'), ('add', 'D'), ('transition_to', 'D'), ('drive', True),
        ]
        for operation, argument in operations:
            method = getattr(machine, operation)
            if operation == 'add' and argument == 'C':
                method(argument)
                machine.bind_advertise('C', always)
            elif argument is None:
                method()
            else:
                method(argument)
            names = machine.names
            assert len(names) == len(set(names))
            assert machine.active_name == SENTINEL_NAME or machine.active_name in names
            if len(machine) == 0:
                assert names == (SENTINEL_NAME, )
                assert machine.active_name == SENTINEL_NAME
        assert machine.names == ('D', )
        assert machine.active_name == 'D'
