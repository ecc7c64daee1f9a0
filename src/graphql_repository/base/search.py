# src/graphql_repository/base/search.py
"""
Parsing of the compact request search syntax.

A search expression is a `;` separated list of `field:value` segments, e.g.
``"name:acme;active:true"``. A segment without a field qualifier is treated
as a bare full-text value. Searchable field lists may carry inline
conditions (``"name:like"``) which are reconciled against the fields a
repository declares as searchable.
"""

import logging
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from .exceptions import UnacceptableFieldsError

# --- Setup Logging ---
log = logging.getLogger(__name__)

TRUE_TOKENS = frozenset({"true", "1", "yes", "on"})
FALSE_TOKENS = frozenset({"false", "0", "no", "off"})

DEFAULT_CONDITION = "="
DEFAULT_ACCEPTED_CONDITIONS: Tuple[str, ...] = ("=", "like")

DeclaredFields = Union[Mapping[str, str], Sequence[Union[str, Tuple[str, str]]]]


# --- Boolean Literals ---
def string_is_boolean(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    token = value.strip().lower()
    return token in TRUE_TOKENS or token in FALSE_TOKENS


def string_to_boolean(value: str) -> bool:
    return value.strip().lower() in TRUE_TOKENS


# --- Search Expression Parsing ---
def parse_search_data(search: Optional[str]) -> Dict[str, Any]:
    """
    Parses ``field:value`` segments into an ordered field -> value mapping.

    Segments without a ``:`` are skipped. Boolean literals are coerced,
    every other value is kept as the raw string.
    """
    search_data: Dict[str, Any] = {}
    if not search or ":" not in search:
        return search_data

    for segment in search.split(";"):
        if ":" not in segment:
            if segment.strip():
                log.warning(f"Skipping unqualified search segment '{segment}'")
            continue
        field, value = segment.split(":", 1)
        field = field.strip()
        if not field:
            log.warning(f"Skipping search segment without a field: '{segment}'")
            continue
        if string_is_boolean(value):
            value = string_to_boolean(value)
        search_data[field] = value

    log.debug(f"Parsed search data from '{search}': {search_data}")
    return search_data


def parse_search_value(search: Optional[str]) -> Optional[str]:
    """
    Returns the bare (unqualified) search value of an expression.

    An expression without any ``;`` or ``:`` is itself the bare value.
    When every segment is qualified, there is no bare value.
    """
    if search is None:
        return None
    if ";" not in search and ":" not in search:
        return search

    for segment in search.split(";"):
        if ":" not in segment:
            return segment
    return None


# --- Searchable Field Resolution ---
def _normalize_declared(declared: Optional[DeclaredFields]) -> Dict[str, str]:
    """Turns the declared searchable fields into a field -> condition mapping."""
    fields: Dict[str, str] = {}
    if not declared:
        return fields
    if isinstance(declared, Mapping):
        for field, condition in declared.items():
            fields[field] = (condition or DEFAULT_CONDITION).strip().lower()
        return fields
    for entry in declared:
        if isinstance(entry, (tuple, list)) and len(entry) == 2:
            field, condition = entry
            fields[field] = (condition or DEFAULT_CONDITION).strip().lower()
        else:
            fields[str(entry)] = DEFAULT_CONDITION
    return fields


def split_field_list(fields: Union[str, Iterable[str], None]) -> Optional[List[str]]:
    """Accepts a ``;`` separated string or an iterable of field tokens."""
    if fields is None:
        return None
    if isinstance(fields, str):
        return [token for token in fields.split(";") if token.strip()]
    return [str(token) for token in fields]


def resolve_fields(
    declared: Optional[DeclaredFields],
    requested: Union[str, Iterable[str], None] = None,
    accepted_conditions: Iterable[str] = DEFAULT_ACCEPTED_CONDITIONS,
) -> Dict[str, str]:
    """
    Reconciles declared searchable fields with a caller supplied subset.

    Args:
        declared: The repository's searchable fields, either a list of names
                  (default condition ``=``) or a mapping of name -> condition.
        requested: Optional field tokens, ``field`` or ``field:condition``.
        accepted_conditions: Conditions a caller may request inline.

    Returns:
        An ordered mapping of field -> condition.

    Raises:
        UnacceptableFieldsError: If fields were requested but none of them
                                 is among the declared searchable fields.
    """
    fields = _normalize_declared(declared)
    requested_list = split_field_list(requested)
    if not requested_list:
        return fields

    accepted = {c.strip().lower() for c in accepted_conditions}
    matched: List[str] = []

    for token in requested_list:
        parts = token.split(":")
        field = parts[0].strip()
        if field not in fields:
            log.debug(f"Requested search field '{field}' is not searchable")
            continue
        matched.append(field)
        if len(parts) != 2:
            continue
        condition = parts[1].strip().lower()
        if condition in accepted:
            fields[field] = condition
        else:
            log.warning(
                f"Ignoring condition '{condition}' for search field '{field}' "
                f"(accepted: {sorted(accepted)})"
            )

    if not matched:
        raise UnacceptableFieldsError(requested_list)

    log.debug(f"Resolved search fields: {fields}")
    return fields
