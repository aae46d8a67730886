# SPDX-FileCopyrightText: 2026 StateManager Developers
# SPDX-License-Identifier: Apache-2.0

"""Initialization and entry-point for console application."""


# standard libs
import sys

# external libs
from cmdkit.app import Application, ApplicationGroup
from cmdkit.cli import Interface

# internal libs
from statemanager.__meta__ import __version__, __website__, __description__
from statemanager.core.ansi import colorize_usage
from statemanager.core.logging import Logger, initialize_logging
from statemanager.core.fsm import SENTINEL_NAME, State
from statemanager.controller import Controller
from statemanager.demo import DemoApp
from statemanager.config import ConfigApp

# public interface
__all__ = ['Controller', 'State', 'SENTINEL_NAME', 'StateManagerApp', 'main', '__version__', ]

# initialize logger
log = Logger.with_name('statemanager')


# inject logger setup into command-line framework
Application.log_critical = log.critical
Application.log_exception = log.exception


APP_NAME = 'state-manager'
APP_USAGE = f"""\
Usage:
{APP_NAME} [-h] [-v] <command> [<args>...]

{__description__}\
"""

APP_HELP = f"""\
{APP_USAGE}

Commands:
  demo                   {DemoApp.__doc__}
  config                 {ConfigApp.__doc__}

Options:
  -h, --help             Show this message and exit.
  -v, --version          Show the version and exit.

Issue tracking at:
{__website__}\
"""


class StateManagerApp(ApplicationGroup):
    """Top-level application class for console application."""

    interface = Interface(APP_NAME,
                          colorize_usage(APP_USAGE),
                          colorize_usage(APP_HELP))

    interface.add_argument('-v', '--version', action='version', version=__version__)
    interface.add_argument('command')

    command = None
    commands = {
        'demo': DemoApp,
        'config': ConfigApp,
    }


def main() -> int:
    """Entry-point for console application."""
    initialize_logging()
    return StateManagerApp.main(sys.argv[1:])
