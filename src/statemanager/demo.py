# SPDX-FileCopyrightText: 2026 StateManager Developers
# SPDX-License-Identifier: Apache-2.0

"""Drive an example state machine."""


# type annotations
from __future__ import annotations
from typing import List

# standard libs
import sys
from dataclasses import dataclass

# external libs
from cmdkit.app import Application
from cmdkit.cli import Interface, ArgumentError
from rich.console import Console
from rich.table import Table

# internal libs
from statemanager.core.config import config
from statemanager.core.logging import Logger
from statemanager.core.exceptions import get_shared_exception_mapping
from statemanager.controller import Controller

# public interface
__all__ = ['DemoStep', 'run_demo', 'DemoApp', ]

# initialize logger
log = Logger.with_name(__name__)


@dataclass
class DemoStep:
    """Outcome of one drive cycle."""

    cycle: int
    active: str
    result: bool


def run_demo(cycles: int = 2) -> List[DemoStep]:
    """
    Drive an empty controller once, then add a single state and drive `cycles` times.

    The state ('state1') advertises itself unconditionally and its tick succeeds
    only when a shared counter equals one. The counter starts at zero and is
    incremented after every cycle, so the first cycle moves out of the sentinel
    state and the second reports success.
    """
    counter = {'value': 0}
    machine = Controller()

    result = machine.drive(transition=True)
    steps = [DemoStep(0, machine.active_name, result), ]

    machine.add('state1')
    machine.bind_tick('state1', lambda: counter['value'] == 1)
    machine.bind_advertise('state1', lambda active: True)

    for cycle in range(1, cycles + 1):
        result = machine.drive(transition=True)
        steps.append(DemoStep(cycle, machine.active_name, result))
        log.info(f'Cycle {cycle}: {machine.active_name} ({result})')
        counter['value'] += 1

    return steps


APP_NAME = 'state-manager demo'
APP_USAGE = f"""\
Usage:
  {APP_NAME} [-h] [-n NUM] [--raw]
  {__doc__}\
"""

APP_HELP = f"""\
{APP_USAGE}

Options:
  -n, --cycles   NUM     Number of drive cycles after adding a state (default: {config.demo.cycles}).
  -r, --raw              Print results only (1 or 0).
  -h, --help             Show this message and exit.\
"""


class DemoApp(Application):
    """Drive an example state machine."""

    name = APP_NAME
    interface = Interface(APP_NAME, APP_USAGE, APP_HELP)

    cycles: int = config.demo.cycles
    interface.add_argument('-n', '--cycles', type=int, default=cycles)

    raw_mode: bool = False
    interface.add_argument('-r', '--raw', action='store_true', dest='raw_mode')

    exceptions = {
        **get_shared_exception_mapping(__name__)
    }

    def run(self: DemoApp) -> None:
        """Business logic for `demo`."""
        if self.cycles < 0:
            raise ArgumentError(f'Expected non-negative number of cycles, given {self.cycles}')
        steps = run_demo(self.cycles)
        if self.raw_mode:
            for step in steps:
                print(int(step.result), file=sys.stdout, flush=True)
        elif sys.stdout.isatty():
            self.print_table(steps)
        else:
            for step in steps:
                print(f'{step.cycle} {step.active} {step.result}', file=sys.stdout, flush=True)

    @staticmethod
    def print_table(steps: List[DemoStep]) -> None:
        """Format results as a table on the console."""
        table = Table(title='Drive cycles')
        table.add_column('Cycle', justify='right')
        table.add_column('Active')
        table.add_column('Result')
        for step in steps:
            table.add_row(str(step.cycle), step.active,
                          '[green]success[/green]' if step.result else '[red]failure[/red]')
        Console().print(table)
