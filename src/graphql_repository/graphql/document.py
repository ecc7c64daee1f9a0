# src/graphql_repository/graphql/document.py
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from graphql_repository.base.arguments import EnumValue
from graphql_repository.base.interfaces import Document, DocumentKind
from graphql_repository.base.state import FieldSelection

# --- Setup Logging ---
log = logging.getLogger(__name__)

META_FIELDS = ["count"]


# --- Document Builder ---
class DocumentBuilder:
    """
    Builds `Document` objects using a fluent API. The builder is reusable:
    `reset()` clears everything but the document kind.
    """

    def __init__(self, kind: DocumentKind = DocumentKind.QUERY):
        self._kind = kind
        self.reset()

    @classmethod
    def query(cls) -> "DocumentBuilder":
        return cls(DocumentKind.QUERY)

    @classmethod
    def mutation(cls) -> "DocumentBuilder":
        return cls(DocumentKind.MUTATION)

    def reset(self) -> "DocumentBuilder":
        self._name: Optional[str] = None
        self._body: FieldSelection = []
        self._arguments: Dict[str, Any] = {}
        self._meta_operation: Optional[str] = None
        return self

    def name(self, name: str) -> "DocumentBuilder":
        if not name:
            raise ValueError("Operation name must not be empty.")
        self._name = name
        return self

    def body(self, fields: FieldSelection) -> "DocumentBuilder":
        if isinstance(fields, str):
            fields = [fields]
        self._body = list(fields)
        return self

    def arguments(self, arguments: Mapping[str, Any]) -> "DocumentBuilder":
        self._arguments = dict(arguments)
        return self

    def meta(self, meta_operation: str) -> "DocumentBuilder":
        self._meta_operation = meta_operation
        return self

    def build(self) -> Document:
        if self._name is None:
            raise ValueError("Cannot build a document without an operation name.")
        document = Document(
            operation=self._name,
            kind=self._kind,
            fields=list(self._body),
            arguments=dict(self._arguments),
            include_meta=self._meta_operation is not None,
            meta_operation=self._meta_operation,
        )
        log.debug(f"Built {document!r}")
        return document


# --- Rendering ---
def render_value(value: Any) -> str:
    """Renders a Python value as a GraphQL input literal."""
    if value is None:
        return "null"
    if isinstance(value, EnumValue):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return render_value(value.value)
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        inner = ", ".join(f"{k}: {render_value(v)}" for k, v in value.items())
        return f"{{{inner}}}"
    if isinstance(value, (list, tuple, set)):
        return f"[{', '.join(render_value(v) for v in value)}]"
    raise TypeError(f"Cannot render value of type {type(value).__name__} as GraphQL")


def render_arguments(arguments: Mapping[str, Any]) -> str:
    if not arguments:
        return ""
    return "(" + ", ".join(f"{k}: {render_value(v)}" for k, v in arguments.items()) + ")"


def render_selection(fields: FieldSelection) -> str:
    parts: List[str] = []
    for entry in fields:
        if isinstance(entry, Mapping):
            for relation, sub_fields in entry.items():
                if isinstance(sub_fields, str):
                    sub_fields = [sub_fields]
                parts.append(f"{relation} {render_selection(sub_fields)}")
        else:
            parts.append(str(entry))
    return "{ " + " ".join(parts) + " }"


class DocumentRenderer:
    """Renders `Document` objects as GraphQL source text."""

    def __init__(self, meta_fields: Optional[List[str]] = None):
        self.meta_fields = meta_fields or list(META_FIELDS)

    def render(self, document: Document) -> str:
        root = [
            f"{document.operation}{render_arguments(document.arguments)} "
            f"{render_selection(document.fields or ['id'])}"
        ]
        if document.include_meta and document.meta_operation:
            meta_arguments = {
                k: v for k, v in document.arguments.items() if k == "where"
            }
            root.append(
                f"{document.meta_operation}{render_arguments(meta_arguments)} "
                f"{render_selection(self.meta_fields)}"
            )
        text = f"{document.kind.value} {{ {' '.join(root)} }}"
        log.debug(f"Rendered document: {text}")
        return text
