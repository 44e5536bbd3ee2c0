"""The invocation context handed to every command handler.

Typer parses argv into typed parameters; main.py packs them into an
`InvocationContext` so handlers see one read-only bag of flags and positional
arguments regardless of which command they serve.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from composecli.domain.errors import ArgumentValidationError


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class InvocationContext:
    """Parsed flags and positional arguments for one command invocation."""

    command: str
    args: Tuple[str, ...] = ()
    flags: Mapping[str, Any] = field(default_factory=dict)
    global_flags: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "flags", _frozen(self.flags))
        object.__setattr__(self, "global_flags", _frozen(self.global_flags))

    def get_bool(self, name: str) -> bool:
        return bool(self.flags.get(name, False))

    def get_int(self, name: str) -> int:
        """Returns the flag as an integer, 0 when unset.

        Raises:
            ArgumentValidationError: If the value is not an integer.
        """
        value = self.flags.get(name)
        if value is None:
            return 0
        if isinstance(value, bool):
            raise ArgumentValidationError(f"Invalid value for --{name}: {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ArgumentValidationError(f"Invalid value for --{name}: {value!r}") from None

    def get_str(self, name: str) -> str:
        value = self.flags.get(name)
        return "" if value is None else str(value)

    def get_global_bool(self, name: str) -> bool:
        return bool(self.global_flags.get(name, False))

    def get_global_str(self, name: str) -> str:
        value = self.global_flags.get(name)
        return "" if value is None else str(value)
