# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from .stream import SUBSCRIBE_COMMAND, MessageProcessor, ValidationStream

__all__ = 'SUBSCRIBE_COMMAND', 'MessageProcessor', 'ValidationStream'
