# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from .collector import PersistDecision, ValidationCollector

__all__ = 'PersistDecision', 'ValidationCollector'
