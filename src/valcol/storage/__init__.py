# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from .database import DatabaseStore, InsertResult, StoreError, ValidationRecord, ValidationStore, metadata, validations

__all__ = 'DatabaseStore', 'InsertResult', 'StoreError', 'ValidationRecord', 'ValidationStore', 'metadata', 'validations'
