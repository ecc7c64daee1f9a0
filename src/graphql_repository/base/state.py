# src/graphql_repository/base/state.py
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .arguments import merge_conditions
from .utils import deep_merge

log = logging.getLogger(__name__)

# A field selection: plain names, or {relation: <selection>} for nested objects.
FieldSelection = List[Union[str, Dict[str, Any]]]


@dataclass
class PendingQueryState:
    """
    Query state accumulated on a repository until the next document is built.

    Values written here by chained calls, criteria and scopes persist across
    operations until one of the explicit reset methods is called. Only
    `include_meta` is consumed by the build that reads it.
    """

    where: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    response_fields: FieldSelection = field(default_factory=list)
    hidden_fields: List[str] = field(default_factory=list)
    include_meta: bool = False

    def merge_where(self, conditions: Mapping[str, Any]) -> "PendingQueryState":
        self.where = merge_conditions(self.where, conditions)
        return self

    def merge_data(self, data: Mapping[str, Any]) -> "PendingQueryState":
        self.data = deep_merge(self.data, data)
        return self

    def reset_arguments(self) -> "PendingQueryState":
        self.where = {}
        self.data = {}
        return self

    def copy(self) -> "PendingQueryState":
        """Creates a deep copy of the state."""
        return copy.deepcopy(self)


# A scope receives the pending state once per operation and returns the state to use.
ScopeCallback = Callable[["PendingQueryState"], "PendingQueryState"]
