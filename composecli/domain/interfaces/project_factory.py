"""Interface for producing a Project from an invocation."""

import abc

from composecli.domain.interfaces.project import Project
from composecli.domain.models.context import InvocationContext


class ProjectFactory(abc.ABC):
    """Abstract Base Class for project resolution."""

    @abc.abstractmethod
    def create(self, context: InvocationContext) -> Project:
        """Resolves the project the invocation targets.

        Args:
            context: The invocation, whose global flags may name compose
                files and a project name.

        Returns:
            A project handle valid for this invocation only.

        Raises:
            Exception: If the project cannot be resolved (missing files,
                malformed service definitions).
        """
