# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
from dataclasses import MISSING, dataclass, fields
from os import PathLike
from pathlib import Path
from typing import Self

from sqlalchemy import URL

__all__ = 'ConfigurationError', 'StoreConfiguration', 'default_configuration_file', 'configuration_template'


default_configuration_file = '~/.valcol'

configuration_template = """\
{
    "user": "validation_user",
    "host": "...",
    "database": "...",
    "password": "...",
    "port": 5432
}"""


class ConfigurationError(Exception):
    """Raised when the store credentials cannot be loaded."""


@dataclass(frozen=True, kw_only=True)
class StoreConfiguration:
    user: str
    host: str
    database: str
    password: str
    port: int = 5432
    driver: str = 'postgresql+asyncpg'

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            # bool is a subclass of int, but it is not a valid port number
            if not isinstance(value, field.type) or isinstance(value, bool):  # type: ignore[arg-type]
                raise ConfigurationError(f'The {field.name!r} setting must be of type {field.type.__name__!r}, not {value.__class__.__name__!r}')  # type: ignore[union-attr]
        if not 0 < self.port < 65536:
            raise ConfigurationError(f'The port number is out of range: {self.port}')

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(user={self.user!r}, host={self.host!r}, database={self.database!r}, password=\'***\', port={self.port!r}, driver={self.driver!r})'

    @property
    def url(self) -> URL:
        return URL.create(self.driver, username=self.user, password=self.password, host=self.host, port=self.port, database=self.database)

    @classmethod
    def load(cls, path: str | PathLike[str] = default_configuration_file) -> Self:
        path = Path(path).expanduser()
        try:
            document = json.loads(path.read_text())
        except OSError as exc:
            raise ConfigurationError(f'Cannot read the configuration file {str(path)!r}: {exc.strerror or exc}') from exc
        except ValueError as exc:  # covers JSONDecodeError and UnicodeDecodeError
            raise ConfigurationError(f'The configuration file {str(path)!r} is not valid JSON: {exc}') from exc
        if not isinstance(document, dict):
            raise ConfigurationError(f'The configuration file {str(path)!r} must contain a JSON object')
        known = {field.name for field in fields(cls)}
        required = {field.name for field in fields(cls) if field.default is MISSING}
        if missing := sorted(required - document.keys()):
            raise ConfigurationError(f'The configuration file {str(path)!r} is missing required settings: {', '.join(missing)}')
        return cls(**{name: value for name, value in document.items() if name in known})
