# src/graphql_repository/base/conditions.py
import logging
from enum import Enum
from typing import Dict, Mapping, Optional, Union

# --- Setup Logging ---
log = logging.getLogger(__name__)


# --- Condition Operator Enum ---
class Operator(Enum):
    """Enumeration of the comparison operators accepted in where-maps."""

    EQ = "="
    LIKE = "like"
    NE = "<>"
    IN = "in"
    NOT_IN = "not_in"
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="


# Filter key suffixes understood by Graphcool/Prisma style backends.
DEFAULT_SUFFIXES: Dict[Operator, str] = {
    Operator.EQ: "",
    Operator.LIKE: "_contains",
    Operator.NE: "_not",
    Operator.IN: "_in",
    Operator.NOT_IN: "_not_in",
    Operator.LT: "_lt",
    Operator.LTE: "_lte",
    Operator.GT: "_gt",
    Operator.GTE: "_gte",
}

_VALUE_MAP = {op.value: op for op in Operator}


def to_operator(condition: Union[Operator, str, None]) -> Optional[Operator]:
    """Returns the Operator for a condition string, or None when it is unknown."""
    if isinstance(condition, Operator):
        return condition
    if not isinstance(condition, str):
        return None
    return _VALUE_MAP.get(condition.strip().lower())


def is_operator(condition: object) -> bool:
    """Checks whether a value names one of the known operators."""
    return to_operator(condition) is not None  # type: ignore[arg-type]


class ConditionMapper:
    """
    Maps logical comparison operators to backend filter key suffixes.

    The mapping is total: `=` and any operator missing from the table leave
    the field name untouched.
    """

    def __init__(self, suffixes: Optional[Mapping[Union[Operator, str], str]] = None):
        table = dict(DEFAULT_SUFFIXES)
        if suffixes:
            for condition, suffix in suffixes.items():
                operator = to_operator(condition)
                if operator is None:
                    log.warning(
                        f"Ignoring suffix '{suffix}' for unknown operator {condition!r}"
                    )
                    continue
                table[operator] = suffix
        self._suffixes = table

    @property
    def suffixes(self) -> Dict[Operator, str]:
        return dict(self._suffixes)

    def suffix_for(self, condition: Union[Operator, str, None]) -> str:
        operator = to_operator(condition)
        if operator is None:
            return ""
        return self._suffixes.get(operator, "")

    def field_for(self, field: str, condition: Union[Operator, str, None] = "=") -> str:
        return f"{field}{self.suffix_for(condition)}"

    def __repr__(self) -> str:
        table = {op.value: suffix for op, suffix in self._suffixes.items()}
        return f"ConditionMapper({table!r})"


_DEFAULT_MAPPER = ConditionMapper()


def suffix_for(condition: Union[Operator, str, None]) -> str:
    """Backend key suffix for a condition using the default table."""
    return _DEFAULT_MAPPER.suffix_for(condition)


def field_for(field: str, condition: Union[Operator, str, None] = "=") -> str:
    """Field name with the default suffix for a condition applied."""
    return _DEFAULT_MAPPER.field_for(field, condition)
