"""Option records passed to project operations.

Each record is built from the invocation flags right before the call it
parameterizes and dropped afterwards. Field names follow the flags they
come from.
"""

from dataclasses import dataclass, field
from typing import Dict

# Service name -> desired number of containers
ScaleMap = Dict[str, int]


@dataclass(frozen=True)
class CreateOptions:
    """Flags shared by `create` and `up`."""
    no_recreate: bool = False
    force_recreate: bool = False
    no_build: bool = False


@dataclass(frozen=True)
class UpOptions:
    create: CreateOptions = field(default_factory=CreateOptions)


@dataclass(frozen=True)
class DownOptions:
    remove_volume: bool = False


@dataclass(frozen=True)
class BuildOptions:
    no_cache: bool = False


@dataclass(frozen=True)
class DeleteOptions:
    remove_volume: bool = False
