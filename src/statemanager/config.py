# SPDX-FileCopyrightText: 2026 StateManager Developers
# SPDX-License-Identifier: Apache-2.0

"""Inspect configuration."""


# type annotations
from __future__ import annotations
from typing import Any

# standard libs
import os
import sys
import json

# external libs
import toml
from cmdkit.app import Application, ApplicationGroup
from cmdkit.cli import Interface
from cmdkit.config import ConfigurationError
from rich.console import Console
from rich.syntax import Syntax

# internal libs
from statemanager.core.platform import path
from statemanager.core.logging import Logger
from statemanager.core.exceptions import get_shared_exception_mapping
from statemanager.core.config import load_file, default as default_config, config as full_config

# public interface
__all__ = ['ConfigApp', 'ConfigGetApp', 'ConfigWhichApp', ]

# initialize logger
log = Logger.with_name(__name__)


GET_PROGRAM = 'state-manager config get'
GET_SYNOPSIS = f'{GET_PROGRAM} [-h] [SECTION[...].VAR] [-x] [-r] [--system | --user | --local | --default]'
GET_USAGE = f"""\
Usage:
  {GET_SYNOPSIS}
  Get configuration option.\
"""

GET_HELP = f"""\
{GET_USAGE}

Arguments:
  SECTION[...].VAR        Path to variable (default: '.').

Options:
      --system            Load from system configuration.
      --user              Load from user configuration.
      --local             Load from local configuration.
      --default           Load from default configuration.
  -x, --expand            Expand variable.
  -r, --raw               Disable formatting on single value output.
  -h, --help              Show this message and exit.\
"""


class ConfigGetApp(Application):
    """Get configuration option."""

    interface = Interface(GET_PROGRAM, GET_USAGE, GET_HELP)

    varpath: str = None
    interface.add_argument('varpath', nargs='?', default='.')

    site_name: str = None
    site_interface = interface.add_mutually_exclusive_group()
    site_interface.add_argument('--system', action='store_const', const='system', dest='site_name')
    site_interface.add_argument('--user', action='store_const', const='user', dest='site_name')
    site_interface.add_argument('--local', action='store_const', const='local', dest='site_name')
    site_interface.add_argument('--default', action='store_const', const='default', dest='site_name')

    expand: bool = False
    interface.add_argument('-x', '--expand', action='store_true')

    raw_mode: bool = False
    interface.add_argument('-r', '--raw', action='store_true', dest='raw_mode')

    exceptions = {
        **get_shared_exception_mapping(__name__)
    }

    def run(self: ConfigGetApp) -> None:
        """Business logic for `config get`."""

        if self.site_name is None:
            config_path = 'configuration'  # NOTE: not meaningful for merged configuration
            config = full_config
        elif self.site_name == 'default':
            config_path = 'default'
            config = default_config
        else:
            config_path = path[self.site_name].config
            if os.path.exists(config_path):
                config = load_file(config_path)
            else:
                raise ConfigurationError(f'{config_path} does not exist')

        if self.varpath == '.':
            self.print_output(config)
            return

        if self.varpath.startswith('.'):
            raise ConfigurationError('Section name cannot start with "."')

        *sections, variable = self.varpath.split('.')
        config_section = config
        subpath = ''
        for section in sections:
            subpath = section if not subpath else f'{subpath}.{section}'
            if section not in config_section:
                raise ConfigurationError(f'"{subpath}" not found in {config_path}')
            if not isinstance(config_section[section], dict):
                raise ConfigurationError(f'"{subpath}" not a section in {config_path}')
            config_section = config_section[section]

        if self.expand:
            value = getattr(config_section, variable, None)
            if value is None:
                raise ConfigurationError(f'"{variable}" not found in {config_path}')
            self.print_output(value)
        elif variable in config_section:
            self.print_output(config_section[variable])
        else:
            raise ConfigurationError(f'"{self.varpath}" not found in {config_path}')

    def print_output(self: ConfigGetApp, value: Any) -> None:
        """Format and print final `value`."""
        value = self.format_output(value)
        if sys.stdout.isatty() and not self.raw_mode:
            output = Syntax(value, 'toml', word_wrap=True,
                            theme=full_config.console.theme,
                            background_color='default')
            Console().print(output)
        else:
            # NOTE: JSON formatting puts quotations - we don't want these on raw output
            print(value.strip('"'), file=sys.stdout, flush=True)

    def format_output(self: ConfigGetApp, value: Any) -> str:
        """Format `value` as appropriate text."""
        if not isinstance(value, dict):
            return json.dumps(value)
        if self.varpath == '.':
            value = toml.dumps(value)
        else:
            value = toml.dumps({self.varpath: value})
        # NOTE: The `toml.dumps` output has unnecessary quoting on section headings
        return '\n'.join(line if not line.startswith('[') else line.replace('"', '')
                         for line in value.strip().split('\n'))


WHICH_PROGRAM = 'state-manager config which'
WHICH_SYNOPSIS = f'{WHICH_PROGRAM} [-h] SECTION[...].VAR [--site]'
WHICH_USAGE = f"""\
Usage:
  {WHICH_SYNOPSIS}
  Show origin of configuration option.\
"""

WHICH_HELP = f"""\
{WHICH_USAGE}

Arguments:
  SECTION[...].VAR        Path to variable.

Options:
      --site              Output originating site name only.
  -h, --help              Show this message and exit.\
"""


class ConfigWhichApp(Application):
    """Show origin of configuration option."""

    interface = Interface(WHICH_PROGRAM, WHICH_USAGE, WHICH_HELP)

    varpath: str = None
    interface.add_argument('varpath', metavar='VAR')

    site_only: bool = False
    interface.add_argument('--site', action='store_true', dest='site_only')

    exceptions = {
        **get_shared_exception_mapping(__name__)
    }

    def run(self: ConfigWhichApp) -> None:
        """Business logic for `config which`."""
        try:
            site = full_config.which(*self.varpath.split('.'))
        except KeyError as error:
            raise ConfigurationError(f'"{self.varpath}" not found') from error
        if site is None:
            raise ConfigurationError(f'"{self.varpath}" not found')
        if self.site_only or site in ('default', 'logging', ):
            print(site)
        elif site == 'env':
            print(f'env: STATEMANAGER_{self.varpath.upper().replace(".", "_")}')
        else:
            print(f'{site}: {path[site].config}')


PROGRAM = 'state-manager config'
USAGE = f"""\
Usage:
  {PROGRAM} [-h]
  {GET_SYNOPSIS}
  {WHICH_SYNOPSIS}

  {__doc__}\
"""

HELP = f"""\
{USAGE}

Commands:
  get              {ConfigGetApp.__doc__}
  which            {ConfigWhichApp.__doc__}

Options:
  -h, --help       Show this message and exit.

Files:
  --system         {path.system.config}
  --user           {path.user.config}
  --local          {path.local.config}
"""


class ConfigApp(ApplicationGroup):
    """Inspect configuration."""

    interface = Interface(PROGRAM, USAGE, HELP)

    interface.add_argument('command')

    command = None
    commands = {'get': ConfigGetApp,
                'which': ConfigWhichApp, }
