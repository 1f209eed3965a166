# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later


__all__ = 'DecodeError',  # noqa: COM818


class DecodeError(ValueError):
    """
    Raised when a validation message cannot be decoded.

    The ``field`` attribute holds the wire name of the field that could not
    be read (or None if the failure is not related to a particular field).
    """

    def __init__(self, field: str | None, reason: str) -> None:
        super().__init__(reason)
        self.field = field
        self.reason = reason

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}({self.field!r}, {self.reason!r})'
