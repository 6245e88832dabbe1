"""Named, loosely-typed parameter bag passed to converters."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, TypeVar, overload

T = TypeVar("T")


class ConversionParameters(Mapping[str, Any]):
    """Case-sensitive mapping of converter-specific settings.

    Converters read values exclusively through :meth:`get_parameter`, which
    falls back to the supplied default whenever the name is missing or the
    stored value has the wrong type. There is no central schema: each converter
    documents its own parameter names.

    Parameters
    ----------
    values : Mapping[str, Any] | None, default=None
        Initial parameter values.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    def add_parameter(self, name: str, value: Any) -> None:
        """Set ``name`` to ``value``, replacing any existing value."""
        self._values[name] = value

    @overload
    def get_parameter(self, name: str, default: T) -> T: ...

    @overload
    def get_parameter(
        self, name: str, default: T | None, expected_type: type[T]
    ) -> T | None: ...

    def get_parameter(
        self,
        name: str,
        default: Any = None,
        expected_type: type | None = None,
    ) -> Any:
        """Return a typed parameter value, or ``default``.

        Parameters
        ----------
        name : str
            Parameter name (case-sensitive).
        default : Any, default=None
            Value returned when the parameter is absent or mistyped.
        expected_type : type | None, default=None
            Required type of the stored value. Defaults to ``type(default)``;
            when both are ``None`` any stored value is accepted.

        Returns
        -------
        Any
            The stored value when it matches the expected type, else
            ``default``. Never raises for missing or mismatched values.
        """
        if name not in self._values:
            return default
        value = self._values[name]
        wanted = expected_type
        if wanted is None and default is not None:
            wanted = type(default)
        if wanted is None or _matches(value, wanted):
            return value
        return default

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ConversionParameters({self._values!r})"


def _matches(value: Any, wanted: type) -> bool:
    # bool is an int subclass, but a flag is never a count.
    if isinstance(value, bool) and wanted is not bool:
        return False
    if wanted is float and isinstance(value, int):
        return True
    return isinstance(value, wanted)
