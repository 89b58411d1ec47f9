"""
Configuration container with mandatory-key lookup.

Keys are kept in insertion order. Setting an existing key overwrites its
value in place.
"""
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Self

from foundation.exceptions import MissingConfiguration, ValidationError

__all__ = ['ParameterHolder']


class ParameterHolder:
    """Ordered key -> value configuration holder.
    """

    def __init__(self, parameters: Mapping[str, Any] | None = None) -> None:
        self._parameters: dict[str, Any] = dict(parameters or {})

    def set_parameter(self, name: str, value: Any) -> Self:
        self._parameters[name] = value
        return self

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self._parameters.get(name, default)

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def unset_parameter(self, name: str) -> Self:
        self._parameters.pop(name, None)
        return self

    def must_have(self, name: str) -> Self:
        """Fail with MissingConfiguration unless `name` is set.
        """
        if name not in self._parameters:
            raise MissingConfiguration(name)
        return self

    def set_default_value(self, name: str, value: Any) -> Self:
        """Set `name` only when it is not set yet.
        """
        if name not in self._parameters:
            self._parameters[name] = value
        return self

    def must_be_one_of(self, name: str, values: Iterable[Any]) -> Self:
        values = list(values)
        if self.get_parameter(name) not in values:
            raise ValidationError(f'Parameter {name!r} must be one of {values}, '
                                  f'got {self.get_parameter(name)!r}')
        return self

    def get_iterator(self) -> Iterator[tuple[str, Any]]:
        return iter(self._parameters.items())

    def to_dict(self) -> dict[str, Any]:
        return dict(self._parameters)

    def __getitem__(self, name: str) -> Any:
        return self.must_have(name)._parameters[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.set_parameter(name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._parameters

    def __iter__(self) -> Iterator[str]:
        return iter(self._parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def __repr__(self) -> str:
        return f'ParameterHolder({self._parameters!r})'
