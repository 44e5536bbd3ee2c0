"""Project implementation backed by the `docker compose` command line.

Every operation maps onto one `docker compose` invocation against the
project's name and compose files. Listing commands are captured and parsed;
everything else runs attached to the terminal so progress output stays
visible.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from composecli.domain.interfaces.log_stream import LogStream
from composecli.domain.interfaces.project import Project
from composecli.domain.models.options import (
    BuildOptions,
    CreateOptions,
    DeleteOptions,
    DownOptions,
    ScaleMap,
    UpOptions,
)
from composecli.domain.models.report import ContainerInfo, ContainerInfoSet
from composecli.infrastructure.compose.runner import AttachedProcess, ComposeCommandError, run_attached, run_captured

logger = logging.getLogger(__name__)

# States in which a container is not considered stopped
ACTIVE_STATES = frozenset({"running", "paused", "restarting"})


def parse_ps_output(output: str) -> ContainerInfoSet:
    """Parses `docker compose ps --format json`.

    Older compose releases print one JSON array, newer ones one object per line.
    """
    output = output.strip()
    if not output:
        return ContainerInfoSet()
    if output.startswith("["):
        entries = json.loads(output)
    else:
        entries = [json.loads(line) for line in output.splitlines() if line.strip()]
    return ContainerInfoSet([_container_info(entry) for entry in entries])


def _container_info(entry: Dict[str, Any]) -> ContainerInfo:
    return ContainerInfo(
        id=str(entry.get("ID", "")),
        name=str(entry.get("Name", "")),
        command=str(entry.get("Command", "")).strip('"'),
        state=str(entry.get("State", "")),
        ports=entry.get("Ports") or _format_publishers(entry.get("Publishers") or []),
    )


def _format_publishers(publishers: List[Dict[str, Any]]) -> str:
    ports = []
    for publisher in publishers:
        target = f"{publisher.get('TargetPort')}/{publisher.get('Protocol', 'tcp')}"
        if publisher.get("PublishedPort"):
            host = publisher.get("URL") or "0.0.0.0"
            ports.append(f"{host}:{publisher['PublishedPort']}->{target}")
        else:
            ports.append(target)
    return ", ".join(ports)


class ComposeLogStream(LogStream):
    """`docker compose logs` running as a child process."""

    def __init__(self, process: AttachedProcess):
        self.process = process
        self._cancelled = False

    def wait(self) -> None:
        return_code = self.process.wait()
        if return_code != 0 and not self._cancelled:
            raise ComposeCommandError(self.process.command, return_code)

    def cancel(self) -> None:
        self._cancelled = True
        self.process.terminate()


class DockerComposeProject(Project):
    """A compose project driven through `docker compose`."""

    def __init__(
        self,
        name: str,
        files: Sequence[str],
        working_dir: Optional[str] = None,
        docker_binary: str = "docker",
    ):
        self.name = name
        self.files = list(files)
        self.working_dir = working_dir
        self.docker_binary = docker_binary
        logger.debug(f"DockerComposeProject initialized: name={name}, files={self.files}")

    def _command(self, *args: str) -> List[str]:
        command = [self.docker_binary, "compose", "--project-name", self.name]
        for compose_file in self.files:
            command += ["--file", compose_file]
        command += args
        return command

    def _capture(self, *args: str) -> str:
        command = self._command(*args)
        result = run_captured(command, cwd=self.working_dir)
        if not result.success:
            raise ComposeCommandError(command, result.return_code, result.stderr)
        return result.stdout

    def _attach(self, *args: str) -> None:
        command = self._command(*args)
        return_code = run_attached(command, cwd=self.working_dir)
        if return_code != 0:
            raise ComposeCommandError(command, return_code)

    def list(self, quiet: bool, services: Sequence[str]) -> ContainerInfoSet:
        return parse_ps_output(self._capture("ps", "--all", "--format", "json", *services))

    def resolve_port(self, index: int, protocol: str, service: str, container_port: str) -> str:
        output = self._capture(
            "port", "--index", str(index), "--protocol", protocol or "tcp", service, container_port
        ).strip()
        if not output or output == ":0":
            raise LookupError(f"No port {container_port}/{protocol} published for {service}")
        return output

    def stop(self, timeout: int, services: Sequence[str]) -> None:
        self._attach("stop", "--timeout", str(timeout), *services)

    def down(self, options: DownOptions, services: Sequence[str]) -> None:
        flags = ["--volumes"] if options.remove_volume else []
        self._attach("down", *flags, *services)

    def build(self, options: BuildOptions, services: Sequence[str]) -> None:
        flags = ["--no-cache"] if options.no_cache else []
        self._attach("build", *flags, *services)

    @staticmethod
    def _create_flags(options: CreateOptions) -> List[str]:
        flags = []
        if options.no_recreate:
            flags.append("--no-recreate")
        if options.force_recreate:
            flags.append("--force-recreate")
        if options.no_build:
            flags.append("--no-build")
        return flags

    def create(self, options: CreateOptions, services: Sequence[str]) -> None:
        self._attach("create", *self._create_flags(options), *services)

    def up(self, options: UpOptions, services: Sequence[str]) -> None:
        # Always detached here; following logs is the caller's job.
        self._attach("up", "--detach", *self._create_flags(options.create), *services)

    def stream_logs(self, follow: bool, services: Sequence[str]) -> None:
        stream = self.open_log_stream(follow, services)
        try:
            stream.wait()
        finally:
            stream.cancel()

    def open_log_stream(self, follow: bool, services: Sequence[str]) -> ComposeLogStream:
        flags = ["--follow"] if follow else []
        # Own session: a terminal Ctrl-C must reach us, not end the stream first.
        process = AttachedProcess(self._command("logs", *flags, *services), cwd=self.working_dir, new_session=follow)
        return ComposeLogStream(process)

    def run(self, service: str, command_parts: Sequence[str]) -> int:
        return run_attached(self._command("run", service, *command_parts), cwd=self.working_dir)

    def start(self, services: Sequence[str]) -> None:
        self._attach("start", *services)

    def restart(self, timeout: int, services: Sequence[str]) -> None:
        self._attach("restart", "--timeout", str(timeout), *services)

    def pull(self, services: Sequence[str]) -> None:
        self._attach("pull", *services)

    def list_stopped_containers(self, services: Sequence[str]) -> List[str]:
        return [info.name for info in self.list(False, services) if info.state.lower() not in ACTIVE_STATES]

    def delete(self, options: DeleteOptions, services: Sequence[str]) -> None:
        # --force: confirmation already happened in the rm handler
        flags = ["--force"] + (["--volumes"] if options.remove_volume else [])
        self._attach("rm", *flags, *services)

    def kill(self, signal: str, services: Sequence[str]) -> None:
        flags = ["--signal", signal] if signal else []
        self._attach("kill", *flags, *services)

    def pause(self, services: Sequence[str]) -> None:
        self._attach("pause", *services)

    def unpause(self, services: Sequence[str]) -> None:
        self._attach("unpause", *services)

    def scale(self, timeout: int, scale: ScaleMap) -> None:
        flags = ["--detach", "--no-recreate", "--timeout", str(timeout)]
        for name, count in scale.items():
            flags += ["--scale", f"{name}={count}"]
        self._attach("up", *flags, *scale.keys())
