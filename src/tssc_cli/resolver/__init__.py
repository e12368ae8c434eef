"""Dependency topology resolver.

This package answers "in what order can the components install, and are the
integrations they need configured?":
1. Loads and validates the dependency collection
2. Builds the dependency graph and detects cycles
3. Orders components deterministically
4. Evaluates each component's required-integrations expression
"""

from .collection import (
    Collection,
    Component,
    load_collection,
    read_collection_source,
)
from .errors import (
    CircularDependencyError,
    ConfiguredIntegrationError,
    DependencyNotFoundError,
    ErrorKind,
    InvalidCollectionError,
    InvalidExpressionError,
    MissingIntegrationsError,
    ResolverError,
    UnknownIntegrationError,
)
from .expression import IntegrationRequirement, evaluate, parse
from .graph import DependencyGraph
from .topology import IntegrationStateSource, ResolutionResult, TopologyBuilder

__all__ = [
    # Collection
    "Collection",
    "Component",
    "load_collection",
    "read_collection_source",
    # Expressions
    "IntegrationRequirement",
    "parse",
    "evaluate",
    # Graph
    "DependencyGraph",
    # Builder
    "IntegrationStateSource",
    "ResolutionResult",
    "TopologyBuilder",
    # Errors
    "ErrorKind",
    "ResolverError",
    "InvalidCollectionError",
    "DependencyNotFoundError",
    "CircularDependencyError",
    "InvalidExpressionError",
    "UnknownIntegrationError",
    "MissingIntegrationsError",
    "ConfiguredIntegrationError",
]
