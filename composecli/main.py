"""Main entry point for the composecli application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler through
the project action adapter. `dispatch` is the only place that ends the
process with a non-zero status.
"""

import logging
from typing import Any, Dict, List, Optional

import typer
from typing_extensions import Annotated

from composecli import __version__
from composecli.core.command_handler import CommandHandler
from composecli.core.project_action import with_project
from composecli.domain.errors import ComposeCliError
from composecli.domain.models.context import InvocationContext
from composecli.infrastructure.cli.display import ConsoleDisplay
from composecli.infrastructure.compose.project_factory import DockerComposeProjectFactory
from composecli.infrastructure.config.settings import (
    get_compose_files,
    get_docker_binary,
    get_log_file,
    get_log_format,
    get_log_level_name,
    get_project_name,
    get_stop_timeout,
    load_configuration,
)
from composecli.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "Note: This is an experimental alternate implementation of the Compose CLI "
    "(https://github.com/docker/compose)"
)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(verbose: bool, files: Optional[List[str]], project_name: Optional[str]) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one invocation.

    This acts as the Composition Root. Configuration and logging are set up
    here, once, before any command runs.
    """
    load_configuration()
    log_level = logging.DEBUG if verbose else getattr(logging, get_log_level_name(), logging.WARNING)
    setup_logging(log_level=log_level, log_format=get_log_format(), log_file=get_log_file())
    logger.warning(DISCLAIMER)

    dependencies: Dict[str, Any] = {}
    dependencies['global_flags'] = {
        'verbose': verbose,
        'file': list(files or []),
        'project_name': project_name,
    }
    dependencies['ui'] = ConsoleDisplay()
    dependencies['project_factory'] = DockerComposeProjectFactory(
        docker_binary=get_docker_binary(),
        default_files=get_compose_files(),
        default_project_name=get_project_name(),
    )
    dependencies['command_handler'] = CommandHandler(ui=dependencies['ui'])
    logger.debug("Dependencies initialized.")
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="composecli",
    help="Define and run multi-container applications.",
    add_completion=False,
    no_args_is_help=True,
)


def dispatch(
    ctx: typer.Context,
    handler_name: str,
    flags: Optional[Dict[str, Any]] = None,
    args: Optional[List[str]] = None,
) -> None:
    """Runs a handler for the current command and maps its outcome to an exit status.

    A ComposeCliError from project resolution, validation, the project call
    or the confirmation prompt is reported and ends the process with its
    exit code. An integer result (from `run`) becomes the exit code.
    """
    dependencies: Dict[str, Any] = ctx.obj
    context = InvocationContext(
        command=ctx.info_name or handler_name,
        args=tuple(args or ()),
        flags=flags or {},
        global_flags=dependencies['global_flags'],
    )
    handler = getattr(dependencies['command_handler'], handler_name)
    action = with_project(dependencies['project_factory'], handler)
    try:
        result = action(context)
    except ComposeCliError as e:
        logger.debug(f"'{context.command}' failed: {e}", exc_info=True)
        dependencies['ui'].display_error(str(e))
        raise typer.Exit(code=e.exit_code)

    if isinstance(result, int) and not isinstance(result, bool):
        # A child killed by signal N reports -N; shells expect 128+N.
        raise typer.Exit(code=result if result >= 0 else 128 - result)


def _timeout(value: Optional[int]) -> int:
    return get_stop_timeout() if value is None else value

# --- Shared parameters ---

ServicesArgument = Annotated[Optional[List[str]], typer.Argument(metavar="[SERVICE]...", show_default=False)]
TimeoutOption = Annotated[
    Optional[int],
    typer.Option("--timeout", "-t", help="Shutdown timeout in seconds (default from settings, 10).", show_default=False),
]
NoRecreateOption = Annotated[
    bool, typer.Option("--no-recreate", help="If containers already exist, don't recreate them.")
]
ForceRecreateOption = Annotated[
    bool, typer.Option("--force-recreate", help="Recreate containers even if their configuration hasn't changed.")
]
NoBuildOption = Annotated[bool, typer.Option("--no-build", help="Don't build an image, even if it's missing.")]

# --- Global startup hook ---

@app.callback()
def before_app(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", help="Show more output.")] = False,
    file: Annotated[
        Optional[List[str]],
        typer.Option("--file", "-f", help="Specify an alternate compose file (repeatable)."),
    ] = None,
    project_name: Annotated[
        Optional[str],
        typer.Option("--project-name", "-p", help="Specify an alternate project name."),
    ] = None,
):
    """Define and run multi-container applications."""
    ctx.obj = create_dependencies(verbose=verbose, files=file, project_name=project_name)

# --- CLI Commands ---

@app.command()
def ps(
    ctx: typer.Context,
    services: ServicesArgument = None,
    quiet: Annotated[bool, typer.Option("-q", help="Only display IDs.")] = False,
):
    """List containers."""
    dispatch(ctx, "handle_ps", {"q": quiet}, services)


@app.command()
def port(
    ctx: typer.Context,
    args: Annotated[Optional[List[str]], typer.Argument(metavar="SERVICE PRIVATE_PORT", show_default=False)] = None,
    index: Annotated[int, typer.Option("--index", help="Index of the container if there are multiple instances.")] = 1,
    protocol: Annotated[str, typer.Option("--protocol", help="tcp or udp.")] = "tcp",
):
    """Print the public port for a port binding."""
    dispatch(ctx, "handle_port", {"index": index, "protocol": protocol}, args)


@app.command()
def build(
    ctx: typer.Context,
    services: ServicesArgument = None,
    no_cache: Annotated[bool, typer.Option("--no-cache", help="Do not use cache when building the image.")] = False,
):
    """Build or rebuild services."""
    dispatch(ctx, "handle_build", {"no-cache": no_cache}, services)


@app.command()
def create(
    ctx: typer.Context,
    services: ServicesArgument = None,
    no_recreate: NoRecreateOption = False,
    force_recreate: ForceRecreateOption = False,
    no_build: NoBuildOption = False,
):
    """Create all services but do not start."""
    flags = {"no-recreate": no_recreate, "force-recreate": force_recreate, "no-build": no_build}
    dispatch(ctx, "handle_create", flags, services)


@app.command()
def up(
    ctx: typer.Context,
    services: ServicesArgument = None,
    detach: Annotated[bool, typer.Option("-d", help="Do not block and log.")] = False,
    no_recreate: NoRecreateOption = False,
    force_recreate: ForceRecreateOption = False,
    no_build: NoBuildOption = False,
    timeout: TimeoutOption = None,
):
    """Bring all services up."""
    flags = {
        "d": detach,
        "no-recreate": no_recreate,
        "force-recreate": force_recreate,
        "no-build": no_build,
        "timeout": _timeout(timeout),
    }
    dispatch(ctx, "handle_up", flags, services)


@app.command()
def start(ctx: typer.Context, services: ServicesArgument = None):
    """Start services."""
    dispatch(ctx, "handle_start", {}, services)


@app.command(context_settings={"allow_interspersed_args": False, "ignore_unknown_options": True})
def run(
    ctx: typer.Context,
    args: Annotated[Optional[List[str]], typer.Argument(metavar="SERVICE [COMMAND]...", show_default=False)] = None,
):
    """Run a one-off command on a service."""
    dispatch(ctx, "handle_run", {}, args)


@app.command()
def logs(
    ctx: typer.Context,
    services: ServicesArgument = None,
    follow: Annotated[bool, typer.Option("--follow", help="Follow log output.")] = False,
):
    """View output from containers."""
    dispatch(ctx, "handle_logs", {"follow": follow}, services)


@app.command()
def restart(ctx: typer.Context, services: ServicesArgument = None, timeout: TimeoutOption = None):
    """Restart services."""
    dispatch(ctx, "handle_restart", {"timeout": _timeout(timeout)}, services)


@app.command()
def stop(ctx: typer.Context, services: ServicesArgument = None, timeout: TimeoutOption = None):
    """Stop services."""
    dispatch(ctx, "handle_stop", {"timeout": _timeout(timeout)}, services)


@app.command()
def down(
    ctx: typer.Context,
    services: ServicesArgument = None,
    volumes: Annotated[bool, typer.Option("-v", help="Remove volumes associated with containers.")] = False,
):
    """Stop and remove containers, networks, images, and volumes."""
    dispatch(ctx, "handle_down", {"v": volumes}, services)


@app.command()
def scale(
    ctx: typer.Context,
    args: Annotated[Optional[List[str]], typer.Argument(metavar="SERVICE=NUM...", show_default=False)] = None,
    timeout: TimeoutOption = None,
):
    """Set number of containers for a service."""
    dispatch(ctx, "handle_scale", {"timeout": _timeout(timeout)}, args)


@app.command()
def rm(
    ctx: typer.Context,
    services: ServicesArgument = None,
    force: Annotated[bool, typer.Option("--force", "-f", help="Allow deletion of all services.")] = False,
    volumes: Annotated[bool, typer.Option("-v", help="Remove volumes associated with containers.")] = False,
):
    """Delete services."""
    dispatch(ctx, "handle_delete", {"force": force, "v": volumes}, services)


@app.command()
def pull(ctx: typer.Context, services: ServicesArgument = None):
    """Pull images of services."""
    dispatch(ctx, "handle_pull", {}, services)


@app.command()
def kill(
    ctx: typer.Context,
    services: ServicesArgument = None,
    signal: Annotated[str, typer.Option("--signal", "-s", help="SIGNAL to send to the container.")] = "SIGKILL",
):
    """Force stop service containers."""
    dispatch(ctx, "handle_kill", {"signal": signal}, services)


@app.command()
def pause(ctx: typer.Context, services: ServicesArgument = None):
    """Pause services."""
    dispatch(ctx, "handle_pause", {}, services)


@app.command()
def unpause(ctx: typer.Context, services: ServicesArgument = None):
    """Unpause services."""
    dispatch(ctx, "handle_unpause", {}, services)


@app.command()
def version(ctx: typer.Context):
    """Show version information."""
    ctx.obj['ui'].display_output(f"composecli version {__version__}")

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
