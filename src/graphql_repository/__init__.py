# src/graphql_repository/__init__.py

"""
GraphQL Repository Library Initialization.

This package provides an asynchronous repository pattern for GraphQL APIs:
repositories translate search clauses, where-maps, criteria and chained
settings into query and mutation documents, execute them through a
transport and wrap every outcome in a uniform result envelope.

It initializes a logger with a NullHandler and makes the repository, its
configuration, criteria, transports and exceptions available at the top
level.
"""

import logging

# --------------------------------------------------------------------------
# Logging Setup
# --------------------------------------------------------------------------
# Library logs are discarded unless the consuming application configures
# logging for "graphql_repository".
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
logger.propagate = False

# --------------------------------------------------------------------------
# Core Exports
# --------------------------------------------------------------------------
from .base.config import RepositoryConfig, RequestParams
from .base.exceptions import (
    ConfigurationError,
    RepositoryException,
    TransportError,
    UnacceptableFieldsError,
    ValidationError,
)
from .base.interfaces import (
    Document,
    DocumentKind,
    Presenter,
    Transport,
    ValidationRule,
    Validator,
)
from .base.result import Page, ResultEnvelope, ResultNormalizer
from .base.state import PendingQueryState

# --------------------------------------------------------------------------
# Conditions, Search and Criteria
# --------------------------------------------------------------------------
from .base.conditions import ConditionMapper, Operator
from .base.search import parse_search_data, parse_search_value, resolve_fields
from .base.arguments import build_conditions
from .base.criteria import (
    ConditionsCriteria,
    CriteriaChain,
    Criterion,
    register_criterion,
)
from .criteria.request import RequestCriteria

# --------------------------------------------------------------------------
# Validation and Presentation
# --------------------------------------------------------------------------
from .base.validation import PydanticValidator
from .base.presenter import CallablePresenter, ModelPresenter

# --------------------------------------------------------------------------
# Repository and Transports
# --------------------------------------------------------------------------
from .graphql.naming import OperationNaming
from .graphql.document import DocumentBuilder, DocumentRenderer
from .graphql.repository import GraphQLRepository
from .transport.http import HttpTransport
from .transport.memory import InMemoryTransport

__all__ = [
    # Repository
    "GraphQLRepository",
    "RepositoryConfig",
    "RequestParams",
    "PendingQueryState",
    "OperationNaming",
    # Results
    "ResultEnvelope",
    "ResultNormalizer",
    "Page",
    # Exceptions
    "RepositoryException",
    "ConfigurationError",
    "UnacceptableFieldsError",
    "ValidationError",
    "TransportError",
    # Contracts
    "Transport",
    "Validator",
    "Presenter",
    "ValidationRule",
    "Document",
    "DocumentKind",
    # Conditions and search
    "Operator",
    "ConditionMapper",
    "build_conditions",
    "parse_search_data",
    "parse_search_value",
    "resolve_fields",
    # Criteria
    "Criterion",
    "CriteriaChain",
    "ConditionsCriteria",
    "RequestCriteria",
    "register_criterion",
    # Validation and presentation
    "PydanticValidator",
    "ModelPresenter",
    "CallablePresenter",
    # Documents and transports
    "DocumentBuilder",
    "DocumentRenderer",
    "HttpTransport",
    "InMemoryTransport",
    # Logging
    "logger",
]

__version__ = "0.1.0"
