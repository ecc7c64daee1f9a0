# src/graphql_repository/base/arguments.py
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence

from .conditions import ConditionMapper, Operator, is_operator
from .utils import deep_merge, prepare_for_transport, undot

# --- Setup Logging ---
log = logging.getLogger(__name__)

OR_KEY = "OR"
AND_KEY = "AND"

_DEFAULT_MAPPER = ConditionMapper()


class ConditionTriple(NamedTuple):
    """A single ``field <operator> value`` condition."""

    field: str
    operator: str
    value: Any


class EnumValue(str):
    """A string rendered as a bare enum literal instead of a quoted string."""

    def __repr__(self) -> str:
        return f"EnumValue({str(self)!r})"


# --- Search Triples ---
def build_where(
    resolved_fields: Mapping[str, str],
    search_data: Mapping[str, Any],
    fallback: Optional[Any] = None,
) -> List[ConditionTriple]:
    """
    Pairs resolved searchable fields with values found in the search data.

    Fields without a value are left out. When `fallback` is given it is used
    as the value of every field the search data does not mention.
    """
    triples: List[ConditionTriple] = []
    for field_name, condition in resolved_fields.items():
        if field_name in search_data and search_data[field_name] is not None:
            value = search_data[field_name]
        elif fallback is not None:
            value = fallback
        else:
            continue
        triples.append(
            ConditionTriple(field_name, (condition or "=").strip().lower(), value)
        )
    log.debug(f"Built search triples: {triples}")
    return triples


def triples_to_conditions(triples: Sequence[ConditionTriple]) -> Dict[str, Any]:
    """Converts triples into a where-map of ``field -> [condition, value]``."""
    return {t.field: [t.operator, t.value] for t in triples}


def triples_to_or_group(
    triples: Sequence[ConditionTriple], mapper: Optional[ConditionMapper] = None
) -> Dict[str, Any]:
    """Converts triples into a single disjunctive ``OR`` group."""
    mapper = mapper or _DEFAULT_MAPPER
    return {
        OR_KEY: [
            {mapper.field_for(t.field, t.operator): prepare_for_transport(t.value)}
            for t in triples
        ]
    }


# --- Where-map Translation ---
def _is_condition_pair(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and (isinstance(value[0], Operator) or is_operator(value[0]))
    )


def _condition_entry(
    key: str, value: Any, mapper: ConditionMapper
) -> Dict[str, Any]:
    if _is_condition_pair(value):
        condition, val = value
        return {mapper.field_for(key, condition): prepare_for_transport(val)}
    return {key: prepare_for_transport(value)}


def _build_or_group(group: Any, mapper: ConditionMapper) -> List[Dict[str, Any]]:
    # Already expanded list of where-maps
    if isinstance(group, (list, tuple)):
        return [build_conditions(item, mapper) for item in group]
    if not isinstance(group, Mapping) or "keys" not in group:
        raise ValueError(
            f"An OR group requires a mapping with 'keys' and 'value', got {group!r}"
        )
    value = group.get("value")
    return [_condition_entry(key, value, mapper) for key in group["keys"]]


def build_conditions(
    where: Mapping[str, Any], mapper: Optional[ConditionMapper] = None
) -> Dict[str, Any]:
    """
    Translates a caller supplied where-map into backend filter arguments.

    - ``"a.b": v`` expands into ``{"a": {"b": v}}``
    - ``"OR": {"keys": [...], "value": v}`` becomes a list of single-key
      objects, one per key, sharing the condition/value pair
    - ``field: [condition, v]`` applies the condition suffix to the key
    - anything else is a plain equality entry
    """
    mapper = mapper or _DEFAULT_MAPPER
    conditions: Dict[str, Any] = {}

    for key, value in where.items():
        if key == OR_KEY:
            conditions[OR_KEY] = _build_or_group(value, mapper)
            continue

        if "." in key:
            head, _, last = key.rpartition(".")
            leaf = _condition_entry(last, value, mapper)
            nested = undot({f"{head}.{k}": v for k, v in leaf.items()})
            conditions = deep_merge(conditions, nested)
            continue

        conditions = deep_merge(conditions, _condition_entry(key, value, mapper))

    log.debug(f"Built where conditions: {conditions}")
    return conditions


# --- Combining Where-maps ---
def merge_conditions(
    base: Mapping[str, Any], conditions: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Merges translated where-maps so that both keep filtering.

    Plain keys are deep-merged. An `OR` group never replaces a different
    group already present: the later one is added to the `AND` list, so
    `{OR: a}` merged with `{OR: b}` gives `{OR: a, AND: [{OR: b}]}`. Merging
    a group that is already present changes nothing.
    """
    merged = deep_merge(
        dict(base), {k: v for k, v in conditions.items() if k != OR_KEY}
    )
    group = conditions.get(OR_KEY)
    if group is None:
        return merged

    existing = merged.get(OR_KEY)
    conjuncts = merged.get(AND_KEY)
    if existing is None:
        merged[OR_KEY] = copy.deepcopy(group)
    elif existing != group and {OR_KEY: group} not in (conjuncts or []):
        if not isinstance(conjuncts, list):
            conjuncts = [] if conjuncts is None else [conjuncts]
        merged[AND_KEY] = conjuncts + [{OR_KEY: copy.deepcopy(group)}]
    return merged


# --- Argument Tree ---
@dataclass
class ArgumentTree:
    """The assembled arguments of an outbound query or mutation."""

    where: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[str] = None
    first: Optional[int] = None
    skip: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_arguments(self) -> Dict[str, Any]:
        """Returns the argument object, leaving out every empty slot."""
        arguments: Dict[str, Any] = copy.deepcopy(self.extra)
        if self.where:
            arguments["where"] = copy.deepcopy(self.where)
        if self.data:
            arguments["data"] = copy.deepcopy(self.data)
        if self.order_by:
            arguments["orderBy"] = EnumValue(self.order_by)
        if self.first:
            arguments["first"] = self.first
        if self.skip:
            arguments["skip"] = self.skip
        return arguments

    def is_empty(self) -> bool:
        return not self.to_arguments()


def order_token(field_name: str, direction: str = "asc", fmt: str = "ORDER_{field}_{direction}") -> str:
    """Builds the composite orderBy token for a field and direction."""
    direction = (direction or "asc").strip().upper()
    if direction not in ("ASC", "DESC"):
        raise ValueError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
    return fmt.format(field=field_name, direction=direction)
