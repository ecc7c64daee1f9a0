# src/graphql_repository/base/interfaces.py

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from graphql_repository.base.state import FieldSelection


class DocumentKind(Enum):
    """Kind of outbound document."""

    QUERY = "query"
    MUTATION = "mutation"


class ValidationRule(Enum):
    """Rule set a validator checks attributes against."""

    CREATE = "create"
    UPDATE = "update"


@dataclass
class Document:
    """
    A backend-agnostic description of one outbound query or mutation.

    `meta_operation` names the companion root field that carries pagination
    metadata; it is only rendered when `include_meta` is set.
    """

    operation: str
    kind: DocumentKind = DocumentKind.QUERY
    fields: FieldSelection = field(default_factory=list)
    arguments: Dict[str, Any] = field(default_factory=dict)
    include_meta: bool = False
    meta_operation: Optional[str] = None

    def __repr__(self) -> str:
        parts = [f"operation={self.operation!r}", f"kind={self.kind.value!r}"]
        if self.arguments:
            parts.append(f"arguments={self.arguments!r}")
        parts.append(f"fields={self.fields!r}")
        if self.include_meta:
            parts.append(f"meta_operation={self.meta_operation!r}")
        return f"Document({', '.join(parts)})"


class Transport(ABC):
    """Executes documents against a backend."""

    @abstractmethod
    async def execute(self, document: Document) -> Dict[str, Any]:
        """
        Execute a document.

        Args:
            document: The query or mutation to run.

        Returns:
            The response data object, keyed by root field name.

        Raises:
            TransportError: If the backend or the network reports a failure.
        """
        pass

    async def aclose(self) -> None:
        """Release any resources held by the transport."""
        return None


class Validator(ABC):
    """Checks attributes before they are sent in a mutation."""

    @abstractmethod
    def validate(self, attributes: Mapping[str, Any], rule: ValidationRule) -> None:
        """
        Validate attributes against a rule set.

        Raises:
            ValidationError: Carrying the field level errors.
        """
        pass


class Presenter(ABC):
    """Reshapes a successful entity before it is returned to the caller."""

    @abstractmethod
    def present(self, value: Any) -> Any:
        pass
