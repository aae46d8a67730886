# SPDX-FileCopyrightText: 2026 StateManager Developers
# SPDX-License-Identifier: Apache-2.0

"""Metadata for the state-manager package."""


__pkgname__     = 'statemanager'
__version__     = '1.0.0'
__authors__     = 'StateManager Developers'
__contact__     = 'statemanager@users.noreply.github.com'
__license__     = 'Apache Software License'
__copyright__   = '2023-2026. All Rights Reserved.'
__website__     = 'https://github.com/statemanager/state-manager'
__keywords__    = 'state-machine finite-state-machine robotics controller'
__description__ = 'Embeddable finite state machine with self-nominating states.'
