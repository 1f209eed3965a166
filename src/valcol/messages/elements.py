# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from inspect import Parameter, Signature
from typing import Any, ClassVar, Self, overload

from .datamodel import WireAdapter, WireData, WireReader
from .exceptions import DecodeError

__all__ = 'Structure', 'Field', 'OptionalField'


class Structure:  # noqa: PLW1641
    """
    A sequence of tagged fields that must appear on the wire in the order they are defined.

    Decoding is fail-fast: the first field that cannot be read aborts it with a DecodeError.
    Decoding is also strict about the end of the data: any bytes left after the last
    field are rejected rather than ignored, so a message with unknown trailing fields
    is not accepted.
    """

    __signature__: ClassVar[Signature] = Signature()

    _fields_: ClassVar[dict[str, 'Field']] = {}

    _all_arguments: ClassVar[frozenset[str]]
    _mandatory_arguments: ClassVar[frozenset[str]]
    _default_arguments: ClassVar[dict[str, object]]

    _spans_: dict[str, slice]

    def __new__(cls, **kw: object) -> Self:
        if not cls._all_arguments.issuperset(kw):
            raise TypeError(f'Got an unexpected keyword argument {next(iter(set(kw) - cls._all_arguments))!r}')
        if not cls._mandatory_arguments.issubset(kw):
            raise TypeError(f'Missing a required keyword argument {next(iter(cls._mandatory_arguments - set(kw)))!r}')
        return super().__new__(cls)

    def __init__(self, **kw: object) -> None:
        kw = self._default_arguments | kw
        self._spans_ = {}
        for name in self._fields_:
            setattr(self, name, kw[name])

    def __init_subclass__(cls, **kw: object) -> None:
        super().__init_subclass__(**kw)

        fields = cls._fields_ | {name: value for name, value in cls.__dict__.items() if isinstance(value, Field)}

        cls._fields_ = fields

        cls.__signature__ = Signature(parameters=[descriptor.signature_parameter for descriptor in fields.values()])
        cls._all_arguments = frozenset(cls.__signature__.parameters)
        cls._mandatory_arguments = frozenset(p.name for p in cls.__signature__.parameters.values() if p.default is Parameter.empty)
        cls._default_arguments = {p.name: p.default for p in cls.__signature__.parameters.values() if p.default is not Parameter.empty}

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}({', '.join(f'{name}={getattr(self, name)!r}' for name in self._fields_)})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Structure):
            return all(getattr(self, name) == getattr(other, name) for name in self._fields_)
        return NotImplemented

    @classmethod
    def from_wire(cls, data: WireData) -> Self:
        reader = WireReader(data)
        instance = super().__new__(cls)
        instance._spans_ = {}
        for field in cls._fields_.values():
            field.from_wire(instance, reader)
        if reader.remaining:
            raise DecodeError(None, f'Unexpected {reader.remaining} bytes of trailing data at offset {reader.position}')
        return instance

    def span(self, name: str) -> slice | None:
        """Return the wire span (tag and payload) of the named field, or None if it was not decoded from wire"""
        return self._spans_.get(name)

    def as_dict(self) -> dict[str, Any]:
        """Return the present fields keyed by their wire names"""
        result = {}
        for name, field in self._fields_.items():
            value = getattr(self, name)
            if value is None:
                continue
            match value:
                case bytes():
                    value = value.hex().upper()
                case tuple():
                    value = list(value)
            result[field.wire_name] = value
        return result


class Field[T]:
    """A required field, identified on the wire by its tag"""

    name: str | None
    wire_name: str | None
    tag: bytes
    adapter: type[WireAdapter[T]]
    default: T

    optional: ClassVar[bool] = False

    def __init__(self, adapter: type[WireAdapter[T]], /, *, tag: bytes, wire_name: str | None = None) -> None:
        if adapter._abstract_:
            raise TypeError(f'Cannot use abstract adapter {adapter.__qualname__!r} (need to select a concrete implementation of it, usually one that defines its size)')
        if not 1 <= len(tag) <= 2:
            raise TypeError(f'The field tag must have 1 or 2 bytes: {tag!r}')
        self.name = None
        self.wire_name = wire_name
        self.tag = tag
        self.adapter = adapter
        self.default = NotImplemented

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.adapter.__qualname__}, tag={self.tag!r}, wire_name={self.wire_name!r})'

    def __set_name__(self, owner: type[Structure], name: str) -> None:
        if self.name is None:
            self.name = name
        elif name != self.name:
            raise TypeError(f'Cannot assign the same {self.__class__.__qualname__!r} to two different names: {self.name!r} and {name!r}')
        if self.wire_name is None:
            self.wire_name = ''.join(part.capitalize() for part in name.split('_'))

    @property
    def signature_parameter(self) -> Parameter:
        assert self.name is not None  # noqa: S101 (used by type checkers)
        kwds = {} if self.default is NotImplemented else {'default': self.default}
        return Parameter(name=self.name, kind=Parameter.KEYWORD_ONLY, **kwds)

    @overload
    def __get__(self, instance: None, owner: type[Structure]) -> Self: ...

    @overload
    def __get__(self, instance: Structure, owner: type[Structure] | None = None) -> T: ...

    def __get__(self, instance: Structure | None, owner: type[Structure] | None = None) -> Self | T:
        if instance is None:
            return self
        if self.name is None:
            raise TypeError(f'Cannot use {self.__class__.__qualname__!r} instance without calling __set_name__ on it.')
        try:
            return instance.__dict__[self.name]
        except KeyError as exc:
            raise AttributeError(f'Attribute {self.name!r} of object {instance.__class__.__qualname__!r} is not set') from exc

    def __set__(self, instance: Structure, value: T) -> None:
        if self.name is None:
            raise TypeError(f'Cannot use {self.__class__.__qualname__!r} instance without calling __set_name__ on it.')
        instance.__dict__[self.name] = value

    def __delete__(self, instance: Structure) -> None:
        raise AttributeError(f'Attribute {self.name!r} of {instance.__class__.__qualname__!r} object cannot be deleted')

    def _missing(self, instance: Structure, reader: WireReader) -> None:
        raise DecodeError(self.wire_name, f'{self.wire_name} field missing or out of order at offset {reader.position}')

    def from_wire(self, instance: Structure, reader: WireReader) -> None:
        if self.name is None:
            raise TypeError(f'Cannot use {self.__class__.__qualname__!r} instance without calling __set_name__ on it.')
        start = reader.position
        if not reader.startswith(self.tag):
            self._missing(instance, reader)
            return
        reader.read(len(self.tag))
        try:
            value = self.adapter.from_wire(reader)
        except ValueError as exc:
            raise DecodeError(self.wire_name, f'{self.wire_name} payload missing or incomplete: {exc}') from exc
        instance.__dict__[self.name] = value
        instance._spans_[self.name] = slice(start, reader.position)


class OptionalField[T](Field[T]):
    """A field that is skipped when its tag is not present at the current position"""

    optional: ClassVar[bool] = True

    def __init__(self, adapter: type[WireAdapter[T]], /, *, tag: bytes, wire_name: str | None = None) -> None:
        super().__init__(adapter, tag=tag, wire_name=wire_name)
        self.default = None

    def _missing(self, instance: Structure, reader: WireReader) -> None:
        assert self.name is not None  # noqa: S101 (used by type checkers)
        leftover = reader.peek(len(self.tag))
        if 0 < len(leftover) < len(self.tag) and self.tag.startswith(leftover):
            raise DecodeError(self.wire_name, f'{self.wire_name} field tag incomplete at offset {reader.position}')
        instance.__dict__[self.name] = None
