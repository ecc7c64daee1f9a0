# src/graphql_repository/criteria/request.py
import logging
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from graphql_repository.base.arguments import (build_where,
                                               triples_to_conditions,
                                               triples_to_or_group)
from graphql_repository.base.config import RepositoryConfig
from graphql_repository.base.criteria import Criterion, register_criterion
from graphql_repository.base.search import (parse_search_data,
                                            parse_search_value,
                                            resolve_fields, split_field_list)
from graphql_repository.base.state import FieldSelection, PendingQueryState

if TYPE_CHECKING:
    from graphql_repository.graphql.repository import GraphQLRepository

log = logging.getLogger(__name__)


def _to_count(name: str, value: Any) -> Optional[int]:
    """Coerces a limit/offset request value, ignoring empty or invalid ones."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        log.warning(f"Ignoring non-numeric {name} request value {value!r}")
        return None
    if number < 0:
        log.warning(f"Ignoring negative {name} request value {value!r}")
        return None
    return number or None


@register_criterion
class RequestCriteria(Criterion):
    """
    Drives a repository from request parameters.

    `params` is any mapping of request parameter name to value, e.g. a
    query string already decoded by the web framework:

        {"search": "name:acme;status:active", "searchFields": "name:like",
         "orderBy": "name", "sortedBy": "desc", "filter": "id;name",
         "with": "owner", "limit": "10", "offset": "20"}

    Parameter names come from `RepositoryConfig.params`.
    """

    key = "request"

    def __init__(
        self,
        params: Optional[Mapping[str, Any]] = None,
        config: Optional[RepositoryConfig] = None,
    ):
        self.params = dict(params or {})
        self.config = config

    def _config_for(self, repository: "GraphQLRepository") -> RepositoryConfig:
        return self.config or repository.config

    def _get(self, name: str, default: Any = None) -> Any:
        value = self.params.get(name, default)
        return default if value is None else value

    def apply(
        self, state: PendingQueryState, repository: "GraphQLRepository"
    ) -> PendingQueryState:
        config = self._config_for(repository)
        names = config.params

        self._apply_search(
            repository,
            config,
            search=self._get(names.search),
            search_fields=self._get(names.search_fields),
            search_join=self._get(names.search_join),
        )

        order_by = self._get(names.order_by)
        if order_by:
            sorted_by = self._get(names.sorted_by) or "asc"
            try:
                repository.order_by(order_by, sorted_by)
            except ValueError:
                log.warning(f"Unknown sort direction {sorted_by!r}, sorting ascending")
                repository.order_by(order_by, "asc")

        selection = self._response_fields(repository, self._get(names.filter))
        relations = split_field_list(self._get(names.with_))
        if relations:
            selection = list(selection or repository.get_response_fields())
            # The stored selection may already hold relations from an earlier query
            selected = {
                key for entry in selection if isinstance(entry, Mapping) for key in entry
            }
            for relation in relations:
                if relation in selected:
                    continue
                selected.add(relation)
                selection.append({relation: repository.get_fields(relation) or ["id"]})
        if selection:
            repository.set_response_fields(selection)

        limit = _to_count("limit", self._get(names.limit))
        if limit is not None:
            repository.set_limit(limit)
        offset = _to_count("offset", self._get(names.offset))
        if offset is not None:
            repository.set_offset(offset)

        return repository.state

    def _apply_search(
        self,
        repository: "GraphQLRepository",
        config: RepositoryConfig,
        search: Optional[str],
        search_fields: Any,
        search_join: Optional[str],
    ) -> None:
        declared = repository.get_fields_searchable()
        if not search or not declared:
            return

        fields = resolve_fields(declared, search_fields, config.accepted_conditions)
        search = str(search)
        fallback = parse_search_value(search)
        triples = build_where(fields, parse_search_data(search), fallback)
        if not triples:
            log.debug(f"Search {search!r} matched no searchable field")
            return

        join = (search_join or "").strip().lower()
        if join == "or" or (fallback is not None and join != "and"):
            repository.state.merge_where(triples_to_or_group(triples, repository.mapper))
        else:
            repository.apply_conditions(triples_to_conditions(triples))

    @staticmethod
    def _response_fields(
        repository: "GraphQLRepository", filter_value: Any
    ) -> Optional[FieldSelection]:
        if not filter_value:
            return None
        if isinstance(filter_value, str):
            preset = repository.get_fields(filter_value)
            if preset is not None:
                return preset
        fields: List[Any] = split_field_list(filter_value) or []
        return fields or None

    def __repr__(self) -> str:
        return f"RequestCriteria(params={self.params!r})"
