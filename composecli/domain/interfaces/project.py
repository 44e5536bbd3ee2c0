"""Interface for an orchestration project.

A project is a named group of services, each backed by one or more
containers. composecli only issues calls against it; container lifecycle,
image building and the compose file format live behind this contract.
Implementations report failures by raising.
"""

import abc
from typing import List, Sequence

from composecli.domain.interfaces.log_stream import LogStream
from composecli.domain.models.options import (
    BuildOptions,
    CreateOptions,
    DeleteOptions,
    DownOptions,
    ScaleMap,
    UpOptions,
)
from composecli.domain.models.report import ContainerInfoSet


class Project(abc.ABC):
    """Abstract Base Class for the operations composecli drives on a project.

    `services` is always an ordered sequence of service names; an empty
    sequence means every service in the project.
    """

    @abc.abstractmethod
    def list(self, quiet: bool, services: Sequence[str]) -> ContainerInfoSet:
        """Lists the containers of the given services."""

    @abc.abstractmethod
    def resolve_port(self, index: int, protocol: str, service: str, container_port: str) -> str:
        """Returns the public `host:port` bound to a container port.

        Args:
            index: Container number when the service has several replicas.
            protocol: `tcp` or `udp`.
            service: Service name.
            container_port: Private port inside the container.
        """

    @abc.abstractmethod
    def stop(self, timeout: int, services: Sequence[str]) -> None:
        """Stops containers, waiting `timeout` seconds before killing them."""

    @abc.abstractmethod
    def down(self, options: DownOptions, services: Sequence[str]) -> None:
        """Stops and removes containers."""

    @abc.abstractmethod
    def build(self, options: BuildOptions, services: Sequence[str]) -> None:
        """Builds or rebuilds service images."""

    @abc.abstractmethod
    def create(self, options: CreateOptions, services: Sequence[str]) -> None:
        """Creates containers without starting them."""

    @abc.abstractmethod
    def up(self, options: UpOptions, services: Sequence[str]) -> None:
        """Creates and starts containers, returning once they are started."""

    @abc.abstractmethod
    def stream_logs(self, follow: bool, services: Sequence[str]) -> None:
        """Writes service logs to the terminal.

        Blocks until the stream ends. With `follow` that is when the
        containers stop or the stream breaks.
        """

    @abc.abstractmethod
    def open_log_stream(self, follow: bool, services: Sequence[str]) -> LogStream:
        """Starts writing service logs to the terminal without blocking.

        The caller owns the returned stream and must cancel it once it no
        longer waits on it.
        """

    @abc.abstractmethod
    def run(self, service: str, command_parts: Sequence[str]) -> int:
        """Runs a one-off command in a new container of `service`.

        Returns:
            The exit code of the command.
        """

    @abc.abstractmethod
    def start(self, services: Sequence[str]) -> None:
        """Starts existing containers."""

    @abc.abstractmethod
    def restart(self, timeout: int, services: Sequence[str]) -> None:
        """Restarts containers."""

    @abc.abstractmethod
    def pull(self, services: Sequence[str]) -> None:
        """Pulls service images."""

    @abc.abstractmethod
    def list_stopped_containers(self, services: Sequence[str]) -> List[str]:
        """Returns the names of containers that are not running."""

    @abc.abstractmethod
    def delete(self, options: DeleteOptions, services: Sequence[str]) -> None:
        """Removes stopped containers."""

    @abc.abstractmethod
    def kill(self, signal: str, services: Sequence[str]) -> None:
        """Sends `signal` (e.g. `SIGKILL`) to containers."""

    @abc.abstractmethod
    def pause(self, services: Sequence[str]) -> None:
        pass

    @abc.abstractmethod
    def unpause(self, services: Sequence[str]) -> None:
        pass

    @abc.abstractmethod
    def scale(self, timeout: int, scale: ScaleMap) -> None:
        """Sets the number of containers per service."""
