"""
Registry of value converters.

Converters are opaque here: the holder only maps converter names to
converter objects and database type names to converter names. A holder is
built once per session builder and shared by reference with every session
that builder produces, so it must be treated as read-mostly once the
builder's initialization hook has run.
"""
import logging
from collections.abc import Iterable
from typing import Any, Self

from foundation.client import Client
from foundation.exceptions import ConverterNotFound, ValidationError

__all__ = ['ConverterHolder', 'ConverterClient']

logger = logging.getLogger(__name__)


def _normalize_type(type_name: str) -> str:
    """Drop the pg_catalog schema so `pg_catalog.int4` and `int4` match."""
    if type_name.startswith('pg_catalog.'):
        return type_name[len('pg_catalog.'):]
    return type_name


class ConverterHolder:
    """Name -> converter and type -> converter name registry.
    """

    def __init__(self) -> None:
        self._converters: dict[str, Any] = {}
        self._types: dict[str, str] = {}

    def register_converter(self, name: str, converter: Any, types: Iterable[str],
                           strict: bool = True) -> Self:
        """Add a converter and bind it to the given type names.
        """
        self.add_converter(name, converter, strict)
        for type_name in types:
            self.add_type_to_converter(name, type_name)
        return self

    def add_converter(self, name: str, converter: Any, strict: bool = True) -> Self:
        if strict and name in self._converters:
            raise ValidationError(f'A converter named {name!r} already exists')
        self._converters[name] = converter
        logger.debug(f'Registered converter {name!r}')
        return self

    def add_type_to_converter(self, name: str, type_name: str) -> Self:
        if name not in self._converters:
            raise ConverterNotFound(f'No converter named {name!r}, available: {self.get_converter_names()}')
        self._types[_normalize_type(type_name)] = name
        return self

    def get_converter(self, name: str) -> Any:
        if name not in self._converters:
            raise ConverterNotFound(f'No converter named {name!r}')
        return self._converters[name]

    def has_converter(self, name: str) -> bool:
        return name in self._converters

    def get_converter_for_type(self, type_name: str) -> Any:
        normalized = _normalize_type(type_name)
        if normalized not in self._types:
            raise ConverterNotFound(f'No converter registered for type {type_name!r}')
        return self._converters[self._types[normalized]]

    def has_type(self, type_name: str) -> bool:
        return _normalize_type(type_name) in self._types

    def get_converter_names(self) -> list[str]:
        return list(self._converters)

    def get_types(self) -> list[str]:
        return list(self._types)

    def get_types_with_converter_name(self) -> dict[str, str]:
        return dict(self._types)


class ConverterClient(Client):
    """Session client exposing a shared ConverterHolder.

    The holder is referenced, not copied: registrations made on it are seen
    by every session holding this client.
    """

    client_type = 'converter'

    def __init__(self, converter_holder: ConverterHolder) -> None:
        super().__init__()
        self.converter_holder = converter_holder

    def get_client_identifier(self) -> str:
        return 'holder'

    def get_converter_for_type(self, type_name: str) -> Any:
        return self.converter_holder.get_converter_for_type(type_name)
