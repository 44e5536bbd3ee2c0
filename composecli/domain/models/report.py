"""Container listing returned by `Project.list`."""

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

HEADER: Tuple[str, ...] = ("Name", "Command", "State", "Ports")


@dataclass(frozen=True)
class ContainerInfo:
    """One row of `ps` output."""
    id: str
    name: str
    command: str = ""
    state: str = ""
    ports: str = ""

    def as_row(self) -> Tuple[str, ...]:
        return (self.name, self.command, self.state, self.ports)


@dataclass
class ContainerInfoSet:
    """All containers reported for a `ps` call, in project order."""
    containers: List[ContainerInfo] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.containers)

    def __iter__(self) -> Iterator[ContainerInfo]:
        return iter(self.containers)

    def rows(self, titles: bool = True) -> List[Tuple[str, ...]]:
        """Table rows, led by the header when `titles` is set."""
        rows = [info.as_row() for info in self.containers]
        if titles:
            rows.insert(0, HEADER)
        return rows

    def ids(self) -> List[str]:
        return [info.id for info in self.containers]
