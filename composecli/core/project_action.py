"""Adapter that turns ordinary handler functions into command actions.

Any callable of shape `(project, context)` can be bound to a command:

    action = with_project(factory, handler.handle_ps)
    exit_code = action(context)

The project is resolved lazily, once per invocation, when the action runs.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

from composecli.domain.errors import ProjectResolutionError
from composecli.domain.interfaces.project import Project
from composecli.domain.interfaces.project_factory import ProjectFactory
from composecli.domain.models.context import InvocationContext

logger = logging.getLogger(__name__)

# A handler: receives the resolved project and the invocation, returns an
# exit code (run), None, or a coroutine producing either (attached up).
ProjectAction = Callable[[Project, InvocationContext], Any]
CommandAction = Callable[[InvocationContext], Optional[int]]


def run_async(coro: Any) -> Any:
    """Drives a handler coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def with_project(factory: ProjectFactory, action: ProjectAction) -> CommandAction:
    """Binds a project factory and a handler into one command action.

    The returned action resolves the project from the context, then calls the
    handler with it. A factory failure is raised as ProjectResolutionError and
    the handler is never called. There are no retries.
    """

    def command_action(context: InvocationContext) -> Optional[int]:
        logger.debug(f"Resolving project for '{context.command}'")
        try:
            project = factory.create(context)
        except Exception as e:
            raise ProjectResolutionError(f"Failed to read project: {e}") from e

        result = action(project, context)
        if inspect.iscoroutine(result):
            result = run_async(result)
        return result

    return command_action
