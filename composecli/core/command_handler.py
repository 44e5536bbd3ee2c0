"""Command Handler: one method per compose verb.

Each handler reads its flags and positional arguments from the invocation
context, builds an options record, calls a single project operation and
prints the result. Handlers never exit the process themselves: bad input,
failed operations and unreadable prompts are raised as ComposeCliError
subclasses and the dispatcher in main.py decides the exit status.
"""

import logging
from typing import Any, Callable, Coroutine, Optional, Sequence

from composecli.core.up_coordinator import UpCoordinator, UpOutcome
from composecli.domain.errors import (
    ArgumentValidationError,
    ConfirmationError,
    ProjectOperationError,
)
from composecli.domain.interfaces.project import Project
from composecli.domain.interfaces.user_interface import UserInterface
from composecli.domain.models.context import InvocationContext
from composecli.domain.models.options import (
    BuildOptions,
    CreateOptions,
    DeleteOptions,
    DownOptions,
    ScaleMap,
    UpOptions,
)

logger = logging.getLogger(__name__)

CoordinatorFactory = Callable[..., UpCoordinator]


def parse_scale_args(args: Sequence[str]) -> ScaleMap:
    """Builds a scale map from `name=count` tokens.

    A service named twice keeps the last count given.

    Raises:
        ArgumentValidationError: On a token without `=`, an empty name, or a
            count that is not a non-negative integer.
    """
    services_scale: ScaleMap = {}
    for arg in args:
        name, sep, value = arg.partition("=")
        if not sep or not name:
            raise ArgumentValidationError(f"Invalid scale parameter: {arg}")
        digits = value[1:] if value[:1] in ("+", "-") else value
        if not (digits.isascii() and digits.isdigit()):
            raise ArgumentValidationError(f"Invalid scale parameter: invalid count {value!r} in {arg!r}")
        count = int(value)
        if count < 0:
            raise ArgumentValidationError(f"Invalid scale parameter: negative count in {arg}")
        services_scale[name] = count
    return services_scale


def _create_options(context: InvocationContext) -> CreateOptions:
    return CreateOptions(
        no_recreate=context.get_bool("no-recreate"),
        force_recreate=context.get_bool("force-recreate"),
        no_build=context.get_bool("no-build"),
    )


class CommandHandler:
    """Handles incoming commands and delegates to the project."""

    def __init__(self, ui: UserInterface, coordinator_factory: CoordinatorFactory = UpCoordinator):
        """Initializes the CommandHandler.

        Args:
            ui: Output and prompt channel.
            coordinator_factory: Builds the UpCoordinator for attached `up`.
                Called with project, services, graceful_stop and ui.
        """
        self.ui = ui
        self.coordinator_factory = coordinator_factory

    def _call(self, operation: str, func: Callable[..., Any], *args: Any) -> Any:
        """Runs a project operation, re-raising any failure as ProjectOperationError."""
        logger.debug(f"Calling project.{operation}{args}")
        try:
            return func(*args)
        except Exception as e:
            logger.debug(f"project.{operation} failed: {e}", exc_info=True)
            raise ProjectOperationError(str(e)) from e

    def handle_ps(self, project: Project, context: InvocationContext) -> None:
        """Lists the containers, as a table or as bare ids with -q."""
        quiet = context.get_bool("q")
        all_info = self._call("list", project.list, quiet, context.args)
        if quiet:
            for container_id in all_info.ids():
                self.ui.display_output(container_id)
        else:
            self.ui.display_table(all_info.rows(titles=True), header=True)

    def handle_port(self, project: Project, context: InvocationContext) -> None:
        """Prints the public port for a port binding."""
        if len(context.args) != 2:
            raise ArgumentValidationError("Please pass arguments in the form: SERVICE PORT")

        index = context.get_int("index")
        protocol = context.get_str("protocol")
        service_name, private_port = context.args

        port = self._call("resolve_port", project.resolve_port, index, protocol, service_name, private_port)
        self.ui.display_output(port)

    def handle_stop(self, project: Project, context: InvocationContext) -> None:
        self._call("stop", project.stop, context.get_int("timeout"), context.args)

    def handle_down(self, project: Project, context: InvocationContext) -> None:
        """Stops and removes containers."""
        options = DownOptions(remove_volume=context.get_bool("v"))
        self._call("down", project.down, options, context.args)

    def handle_build(self, project: Project, context: InvocationContext) -> None:
        options = BuildOptions(no_cache=context.get_bool("no-cache"))
        self._call("build", project.build, options, context.args)

    def handle_create(self, project: Project, context: InvocationContext) -> None:
        """Creates all services but does not start them."""
        self._call("create", project.create, _create_options(context), context.args)

    def handle_up(self, project: Project, context: InvocationContext) -> Optional[Coroutine[Any, Any, UpOutcome]]:
        """Brings services up, then follows their logs unless detached.

        Returns:
            None in detached mode, otherwise the attach coroutine, which the
            action adapter runs to completion.
        """
        options = UpOptions(create=_create_options(context))
        self._call("up", project.up, options, context.args)
        if context.get_bool("d"):
            return None

        coordinator = self.coordinator_factory(
            project=project,
            services=context.args,
            graceful_stop=lambda: self.handle_stop(project, context),
            ui=self.ui,
        )
        return coordinator.attach()

    def handle_run(self, project: Project, context: InvocationContext) -> int:
        """Runs a one-off command; its exit code becomes the process exit code."""
        if not context.args:
            raise ArgumentValidationError("No service specified")

        service_name = context.args[0]
        command_parts = list(context.args[1:])

        return self._call("run", project.run, service_name, command_parts)

    def handle_start(self, project: Project, context: InvocationContext) -> None:
        self._call("start", project.start, context.args)

    def handle_restart(self, project: Project, context: InvocationContext) -> None:
        self._call("restart", project.restart, context.get_int("timeout"), context.args)

    def handle_logs(self, project: Project, context: InvocationContext) -> None:
        self._call("stream_logs", project.stream_logs, context.get_bool("follow"), context.args)

    def handle_pull(self, project: Project, context: InvocationContext) -> None:
        self._call("pull", project.pull, context.args)

    def handle_delete(self, project: Project, context: InvocationContext) -> None:
        """Removes stopped containers, asking first unless --force is given.

        Only an answer of exactly `y` or `Y` proceeds. Anything else, an
        empty line included, returns without deleting.
        """
        stopped_containers = self._call("list_stopped_containers", project.list_stopped_containers, context.args)
        if not stopped_containers:
            self.ui.display_output("No stopped containers")
            return

        if not context.get_bool("force"):
            self.ui.display_output(f"Going to remove {', '.join(stopped_containers)}\nAre you sure? [yN]")
            try:
                answer = self.ui.read_line()
            except (EOFError, OSError) as e:
                raise ConfirmationError(f"Failed to read confirmation: {str(e) or 'end of input'}") from e
            if answer not in ("y", "Y"):
                logger.debug(f"Removal declined (answer={answer!r})")
                return

        options = DeleteOptions(remove_volume=context.get_bool("v"))
        self._call("delete", project.delete, options, context.args)

    def handle_kill(self, project: Project, context: InvocationContext) -> None:
        self._call("kill", project.kill, context.get_str("signal"), context.args)

    def handle_pause(self, project: Project, context: InvocationContext) -> None:
        self._call("pause", project.pause, context.args)

    def handle_unpause(self, project: Project, context: InvocationContext) -> None:
        self._call("unpause", project.unpause, context.args)

    def handle_scale(self, project: Project, context: InvocationContext) -> None:
        """Sets the number of containers to run for each `SERVICE=NUM` argument."""
        services_scale = parse_scale_args(context.args)
        self._call("scale", project.scale, context.get_int("timeout"), services_scale)
