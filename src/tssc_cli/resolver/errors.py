"""Resolver error taxonomy.

Every failure the topology resolver can detect from in-memory data is a
``ResolverError`` subclass carrying structured context. None of them is
transient, so front ends must never retry them. Transport failures live in
``tssc_cli.cluster.errors`` and are never mixed into this hierarchy.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar


class ErrorKind(Enum):
    """Closed set of resolver error kinds."""

    INVALID_COLLECTION = "invalid_collection"
    DEPENDENCY_NOT_FOUND = "dependency_not_found"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    INVALID_EXPRESSION = "invalid_expression"
    UNKNOWN_INTEGRATION = "unknown_integration"
    MISSING_INTEGRATIONS = "missing_integrations"
    CONFIGURED_INTEGRATION = "configured_integration"


@dataclass
class ResolverError(Exception):
    """Base class for resolver errors."""

    kind: ClassVar[ErrorKind]
    retryable: ClassVar[bool] = False

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Human-readable one-line summary."""
        return self.kind.value.replace("_", " ")

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dict."""
        return {"kind": self.kind.value, "message": self.message, **asdict(self)}


@dataclass
class InvalidCollectionError(ResolverError):
    """The dependency collection is malformed."""

    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_COLLECTION

    reason: str = ""

    @property
    def message(self) -> str:
        if self.reason:
            return f"invalid dependency collection: {self.reason}"
        return "invalid dependency collection"


@dataclass
class DependencyNotFoundError(ResolverError):
    """A component depends on a name absent from the collection."""

    kind: ClassVar[ErrorKind] = ErrorKind.DEPENDENCY_NOT_FOUND

    component: str = ""
    dependency: str = ""

    @property
    def message(self) -> str:
        return f"dependency not found: {self.component!r} depends on {self.dependency!r}"


@dataclass
class CircularDependencyError(ResolverError):
    """The dependency graph contains a cycle.

    ``path`` starts and ends with the same component.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.CIRCULAR_DEPENDENCY

    path: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"circular dependency: {' -> '.join(self.path)}"


@dataclass
class InvalidExpressionError(ResolverError):
    """A required-integrations expression does not parse."""

    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_EXPRESSION

    component: str = ""
    expression: str = ""
    reason: str = ""

    @property
    def message(self) -> str:
        msg = f"invalid integrations expression {self.expression!r}"
        if self.component:
            msg += f" in {self.component!r}"
        if self.reason:
            msg += f": {self.reason}"
        return msg


@dataclass
class UnknownIntegrationError(ResolverError):
    """An expression references an unrecognised integration name."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN_INTEGRATION

    integration: str = ""
    component: str = ""

    @property
    def message(self) -> str:
        msg = f"unknown integration {self.integration!r}"
        if self.component:
            msg += f" required by {self.component!r}"
        return msg


@dataclass
class MissingIntegrationsError(ResolverError):
    """One or more required integrations are not configured.

    ``integrations`` is sorted and de-duplicated; ``components`` maps each
    unsatisfied component to its expression.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.MISSING_INTEGRATIONS

    integrations: list[str] = field(default_factory=list)
    components: dict[str, str] = field(default_factory=dict)

    @property
    def message(self) -> str:
        if self.integrations:
            return f"missing integrations: {', '.join(self.integrations)}"
        return f"unsatisfied integration requirements: {', '.join(sorted(self.components))}"


@dataclass
class ConfiguredIntegrationError(ResolverError):
    """An integration create targeted an existing secret without --force."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONFIGURED_INTEGRATION

    integration: str = ""
    secret: str = ""

    @property
    def message(self) -> str:
        return f"integration {self.integration!r} is already configured: {self.secret}"
