# SPDX-FileCopyrightText: 2026 StateManager Developers
# SPDX-License-Identifier: Apache-2.0

"""Platform specific file paths and initialization."""


# standard libs
import os
import sys
import platform

# external libs
from cmdkit.config import Namespace
from cmdkit.app import exit_status

# internal libs
from statemanager.core.ansi import bold, magenta

# public interface
__all__ = ['cwd', 'home', 'site', 'path', 'default_path', ]


cwd = os.getcwd()
home = os.path.expanduser('~')
if 'STATEMANAGER_SITE' not in os.environ:
    local_site = os.path.join(cwd, '.statemanager')
else:
    local_site = os.getenv('STATEMANAGER_SITE')
    if not os.path.isdir(local_site):
        print(f'{bold(magenta("CRITICAL"))} [{__name__}] '
              f'Directory does not exist (STATEMANAGER_SITE={local_site})', file=sys.stderr)
        sys.exit(exit_status.bad_config)


def _site_paths(system: str, user: str, local: str, system_config: str) -> Namespace:
    """Build the path namespace for each site (system, user, local)."""
    return Namespace({
        'system': {
            'log': os.path.join(system, 'log'),
            'config': system_config},
        'user': {
            'log': os.path.join(user, 'log'),
            'config': os.path.join(user, 'config.toml')},
        'local': {
            'log': os.path.join(local, 'log'),
            'config': os.path.join(local, 'config.toml')}
    })


if platform.system() == 'Windows':
    site = Namespace(system=os.path.join(os.getenv('ProgramData', 'C:\\ProgramData'), 'StateManager'),
                     user=os.path.join(os.getenv('AppData', home), 'StateManager'),
                     local=local_site)
    path = _site_paths(site.system, site.user, site.local,
                       system_config=os.path.join(site.system, 'Config.toml'))

elif platform.system() == 'Darwin':
    site = Namespace(system=os.path.join('/', 'Library', 'StateManager'),
                     user=os.path.join(home, 'Library', 'StateManager'),
                     local=local_site)
    path = _site_paths(site.system, site.user, site.local,
                       system_config=os.path.join('/', 'Library', 'Preferences', 'StateManager', 'config.toml'))

elif os.name == 'posix':  # NOTE: likely Linux
    site = Namespace(system=os.path.join('/', 'var', 'lib', 'statemanager'),
                     user=os.path.join(home, '.statemanager'),
                     local=local_site)
    path = _site_paths(site.system, site.user, site.local,
                       system_config=os.path.join('/', 'etc', 'statemanager.toml'))

else:
    print(f'{bold(magenta("CRITICAL"))} [{__name__}] '
          f'Platform unrecognized ({platform.system()})', file=sys.stderr)
    sys.exit(exit_status.bad_config)


if 'STATEMANAGER_SITE' in os.environ:
    default_path = path.local
else:
    default_path = path.user


# NOTE: a read-only home directory is fine for library use;
# traceback files fall back to the working directory (see core.exceptions)
try:
    os.makedirs(default_path.log, exist_ok=True)
except OSError:
    pass
