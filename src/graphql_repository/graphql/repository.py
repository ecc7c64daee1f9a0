# src/graphql_repository/graphql/repository.py

import copy
import logging
from typing import (Any, Callable, Dict, Generic, Iterable, List, Mapping,
                    Optional, TypeVar, Union)

from graphql_repository.base.arguments import (ArgumentTree, build_conditions,
                                               merge_conditions, order_token)
from graphql_repository.base.conditions import ConditionMapper, Operator
from graphql_repository.base.config import RepositoryConfig
from graphql_repository.base.criteria import CriteriaChain, Criterion
from graphql_repository.base.exceptions import (RepositoryException,
                                                TransportError)
from graphql_repository.base.interfaces import (Presenter, Transport,
                                                ValidationRule, Validator)
from graphql_repository.base.result import Page, ResultEnvelope, ResultNormalizer
from graphql_repository.base.search import DeclaredFields
from graphql_repository.base.state import (FieldSelection, PendingQueryState,
                                           ScopeCallback)
from graphql_repository.base.utils import deep_merge, prepare_for_transport
from graphql_repository.graphql.document import DocumentBuilder
from graphql_repository.graphql.naming import (CREATE, DELETE, UPDATE,
                                               UPDATE_OR_CREATE,
                                               OperationNaming)
from graphql_repository.transport.http import HttpTransport

# Type variable for presented entities
T = TypeVar("T")

RawResult = Union[Any, TransportError]


class GraphQLRepository(Generic[T]):
    """
    Repository issuing backend-agnostic queries against a GraphQL API.

    Subclasses describe one entity type:

        class CompanyRepository(GraphQLRepository[dict]):
            entity_type = "Company"
            field_searchable = {"name": "like", "status": "="}
            fields = ["id", "name", "status"]

    Chained calls (`order_by`, `set_limit`, `apply_conditions`, criteria,
    scopes ...) accumulate in a `PendingQueryState` that persists until it
    is explicitly reset. Arguments given to an operation itself (the id of
    `find`, the filter of `find_where`, the limit of `paginate` ...) only
    apply to that call.

    Every operation returns a `ResultEnvelope`. Transport failures are
    reported as failure envelopes and never raised; `ValidationError` and
    `UnacceptableFieldsError` are raised to the caller.

    Instances are not safe for concurrent use: give each request its own
    repository.
    """

    entity_type: Optional[str] = None
    field_searchable: DeclaredFields = []
    fields: FieldSelection = ["id"]
    field_sets: Dict[str, FieldSelection] = {}
    id_field: str = "id"

    # --- Initialization ---
    def __init__(
        self,
        config: RepositoryConfig,
        transport: Optional[Transport] = None,
        presenter: Optional[Presenter] = None,
        validator: Optional[Validator] = None,
        naming: Optional[OperationNaming] = None,
        mapper: Optional[ConditionMapper] = None,
    ):
        """
        Initialize the repository.

        Args:
            config: Shared settings. End point and API key are required.
            transport: Transport to execute documents with. Defaults to an
                       `HttpTransport` built from `config`.
            presenter: Optional presenter, overrides `presenter()`.
            validator: Optional validator, overrides `validator()`.
            naming: Root field naming convention of the backend.
            mapper: Condition suffix table of the backend.

        Raises:
            RepositoryException: If the subclass does not set `entity_type`.
            ConfigurationError: If the end point or API key is missing.
        """
        if not self.entity_type:
            raise RepositoryException(
                f"{self.__class__.__name__} must define 'entity_type'"
            )
        config.require_transport_settings()

        self._config = config
        self._transport = transport or HttpTransport(
            config.end_point,
            config.api_key.get_secret_value(),
            timeout=config.timeout,
        )
        self._naming = naming or OperationNaming(config.list_prefix)
        self._mapper = mapper or ConditionMapper()

        self._state = PendingQueryState()
        self._criteria = CriteriaChain()
        self._scope: Optional[ScopeCallback] = None
        self._skip_presenter = False
        self._presenter = presenter or self.presenter()
        self._validator = validator or self.validator()
        self._normalizer = ResultNormalizer(config.protocol_name, self._presenter)

        self._query_builder = DocumentBuilder.query()
        self._mutation_builder = DocumentBuilder.mutation()

        self._logger = logging.getLogger(
            f"{__name__}.{self.__class__.__name__}[{self.entity_type}]"
        )
        self.boot()
        self._logger.info(
            f"Repository instance created for {self.entity_type} "
            f"(transport: {type(self._transport).__name__})."
        )

    def boot(self) -> None:
        """Hook for subclasses, e.g. to push default criteria."""
        pass

    def presenter(self) -> Optional[Presenter]:
        """Default presenter of the repository. Override to attach one."""
        return None

    def validator(self) -> Optional[Validator]:
        """Default validator of the repository. Override to attach one."""
        return None

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> "GraphQLRepository[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- Accessors ---
    @property
    def config(self) -> RepositoryConfig:
        return self._config

    @property
    def naming(self) -> OperationNaming:
        return self._naming

    @property
    def mapper(self) -> ConditionMapper:
        return self._mapper

    @property
    def state(self) -> PendingQueryState:
        return self._state

    @state.setter
    def state(self, state: PendingQueryState) -> None:
        if not isinstance(state, PendingQueryState):
            raise TypeError(
                f"state must be a PendingQueryState, got {type(state).__name__}"
            )
        self._state = state

    def get_fields_searchable(self) -> DeclaredFields:
        return copy.deepcopy(self.field_searchable)

    def get_fields(self, name: str) -> Optional[FieldSelection]:
        """Returns a named field selection declared in `field_sets`."""
        selection = self.field_sets.get(name)
        return copy.deepcopy(selection) if selection is not None else None

    def get_response_fields(self) -> FieldSelection:
        selection = self._state.response_fields or list(self.fields)
        hidden = set(self._state.hidden_fields)
        if not hidden:
            return copy.deepcopy(selection)
        visible: FieldSelection = []
        for entry in selection:
            if isinstance(entry, Mapping):
                kept = {k: v for k, v in entry.items() if k not in hidden}
                if kept:
                    visible.append(copy.deepcopy(kept))
            elif entry not in hidden:
                visible.append(entry)
        return visible

    def get_criteria(self) -> List[Criterion]:
        return self._criteria.list()

    def is_include_meta(self) -> bool:
        return self._state.include_meta

    # --- Pending State Setters ---
    def set_limit(self, limit: int) -> "GraphQLRepository[T]":
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
            raise ValueError("Limit must be a non-negative integer.")
        self._state.limit = limit
        self._logger.debug(f"Limit set to: {limit}")
        return self

    def reset_limit(self) -> "GraphQLRepository[T]":
        self._state.limit = None
        return self

    def set_offset(self, offset: int) -> "GraphQLRepository[T]":
        if not isinstance(offset, int) or isinstance(offset, bool) or offset < 0:
            raise ValueError("Offset must be a non-negative integer.")
        self._state.offset = offset
        self._logger.debug(f"Offset set to: {offset}")
        return self

    def reset_offset(self) -> "GraphQLRepository[T]":
        self._state.offset = None
        return self

    def set_include_meta(self, include_meta: bool) -> "GraphQLRepository[T]":
        self._state.include_meta = include_meta
        return self

    def set_response_fields(self, fields: FieldSelection) -> "GraphQLRepository[T]":
        self._state.response_fields = list(fields)
        return self

    def visible(self, fields: FieldSelection) -> "GraphQLRepository[T]":
        return self.set_response_fields(fields)

    def hidden(self, fields: Iterable[str]) -> "GraphQLRepository[T]":
        self._state.hidden_fields = list(fields)
        return self

    def order_by(self, field: str, direction: str = "asc") -> "GraphQLRepository[T]":
        self._state.order_by = order_token(field, direction, self._config.order_by_format)
        self._logger.debug(f"Order set to: {self._state.order_by}")
        return self

    def latest(self, field: str = "createdAt") -> "GraphQLRepository[T]":
        return self.order_by(field, "desc")

    def oldest(self, field: str = "createdAt") -> "GraphQLRepository[T]":
        return self.order_by(field, "asc")

    def reset_order(self) -> "GraphQLRepository[T]":
        self._state.order_by = None
        return self

    def apply_conditions(self, where: Mapping[str, Any]) -> "GraphQLRepository[T]":
        """Translates a where-map and merges it into the pending where arguments."""
        self._state.merge_where(build_conditions(where, self._mapper))
        self._logger.debug(f"Pending where arguments: {self._state.where}")
        return self

    def set_where_arguments(self, arguments: Mapping[str, Any]) -> "GraphQLRepository[T]":
        """Replaces the pending where arguments with an already translated map."""
        if arguments:
            self._state.where = dict(arguments)
        return self

    def set_data_arguments(self, arguments: Mapping[str, Any]) -> "GraphQLRepository[T]":
        if arguments:
            self._state.data = prepare_for_transport(dict(arguments))
        return self

    def reset_arguments(self) -> "GraphQLRepository[T]":
        self._state.reset_arguments()
        return self

    # --- Criteria, Scope, Presenter ---
    def push_criteria(self, criterion: Union[Criterion, str]) -> "GraphQLRepository[T]":
        self._criteria.push(criterion)
        return self

    def pop_criteria(self, criterion: Union[Criterion, type, str]) -> "GraphQLRepository[T]":
        self._criteria.pop(criterion)
        return self

    def reset_criteria(self) -> "GraphQLRepository[T]":
        self._criteria.reset()
        return self

    def skip_criteria(self, status: bool = True) -> "GraphQLRepository[T]":
        self._criteria.skip(status)
        return self

    def scope_query(self, scope: ScopeCallback) -> "GraphQLRepository[T]":
        if not callable(scope):
            raise TypeError("scope_query requires a callable")
        self._scope = scope
        return self

    def reset_scope(self) -> "GraphQLRepository[T]":
        self._scope = None
        return self

    def skip_presenter(self, status: bool = True) -> "GraphQLRepository[T]":
        self._skip_presenter = status
        return self

    def set_presenter(self, presenter: Optional[Presenter]) -> "GraphQLRepository[T]":
        self._presenter = presenter
        self._normalizer.presenter = presenter
        return self

    def set_validator(self, validator: Optional[Validator]) -> "GraphQLRepository[T]":
        self._validator = validator
        return self

    # --- Build Sequence ---
    def _apply_scope(self) -> None:
        if self._scope is None:
            return
        result = self._scope(self._state)
        if result is not None:
            self.state = result

    def _apply_criteria(self) -> None:
        self._state = self._criteria.apply_all(self._state, self)

    def _validate(self, attributes: Mapping[str, Any], rule: ValidationRule) -> None:
        if self._validator is not None:
            self._validator.validate(attributes, rule)

    def _prepare_arguments(
        self,
        where: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        extra: Optional[Mapping[str, Any]] = None,
        mutation: bool = False,
        include_where: bool = True,
    ) -> ArgumentTree:
        """Assembles the argument tree from the pending state and per-call overlays."""
        state = self._state
        tree_where: Dict[str, Any] = {}
        if include_where:
            tree_where = copy.deepcopy(state.where)
            if where:
                tree_where = merge_conditions(
                    tree_where, build_conditions(where, self._mapper)
                )

        tree_data = copy.deepcopy(state.data)
        if data:
            tree_data = deep_merge(tree_data, prepare_for_transport(data))

        tree = ArgumentTree(where=tree_where, data=tree_data, extra=dict(extra or {}))
        if not mutation:
            tree.order_by = state.order_by
            tree.first = limit if limit is not None else state.limit
            tree.skip = offset if offset is not None else state.offset
        self._logger.debug(f"Prepared arguments: {tree.to_arguments()}")
        return tree

    async def _execute(
        self,
        builder: DocumentBuilder,
        name: str,
        fields: FieldSelection,
        tree: ArgumentTree,
        include_meta: bool = False,
    ) -> RawResult:
        builder.reset().name(name).body(fields).arguments(tree.to_arguments())
        if include_meta:
            builder.meta(self._naming.meta_query(self.entity_type))
        document = builder.build()

        self._logger.info(f"Executing {document.kind.value} '{name}'")
        try:
            return await self._transport.execute(document)
        except TransportError as e:
            self._logger.error(f"Transport failed for '{name}': {e.message}", exc_info=True)
            return e

    def _normalize(
        self,
        raw: RawResult,
        name: str,
        shape: Optional[Callable[[Dict[str, Any], Any], Any]] = None,
        skip_presenter: bool = False,
    ) -> ResultEnvelope:
        if isinstance(raw, TransportError):
            return self._normalizer.normalize(raw)
        value = raw.get(name) if isinstance(raw, Mapping) else raw
        if shape is not None:
            value = shape(raw, value)
        return self._normalizer.normalize(
            value, skip_presenter=skip_presenter or self._skip_presenter
        )

    async def _query(
        self,
        name: str,
        fields: Optional[FieldSelection],
        tree_kwargs: Optional[Dict[str, Any]] = None,
        shape: Optional[Callable[[Dict[str, Any], Any], Any]] = None,
        skip_presenter: bool = False,
        include_meta: bool = False,
    ) -> ResultEnvelope:
        self._apply_scope()
        self._apply_criteria()
        selection = list(fields) if fields else self.get_response_fields()
        tree = self._prepare_arguments(**(tree_kwargs or {}))
        # Only query documents carry the meta companion field
        include_meta = include_meta or self._state.include_meta
        self._state.include_meta = False
        raw = await self._execute(
            self._query_builder, name, selection, tree, include_meta=include_meta
        )
        return self._normalize(raw, name, shape, skip_presenter)

    async def _mutate(
        self,
        name: str,
        fields: Optional[FieldSelection],
        tree_kwargs: Dict[str, Any],
        skip_presenter: bool = False,
    ) -> ResultEnvelope:
        # Criteria only filter reads
        self._apply_scope()
        selection = list(fields) if fields else self.get_response_fields()
        tree = self._prepare_arguments(mutation=True, **tree_kwargs)
        raw = await self._execute(self._mutation_builder, name, selection, tree)
        return self._normalize(raw, name, skip_presenter=skip_presenter)

    # --- Queries ---
    async def all(self, fields: Optional[FieldSelection] = None) -> ResultEnvelope:
        """Retrieve every entity matching the pending state."""
        return await self._query(self._naming.list_query(self.entity_type), fields)

    async def find(self, id: Any, fields: Optional[FieldSelection] = None) -> ResultEnvelope:
        """Retrieve a single entity by id."""
        return await self._query(
            self._naming.single_query(self.entity_type),
            fields,
            {"where": {self.id_field: id}},
        )

    async def find_by_field(
        self, field: str, value: Any = None, fields: Optional[FieldSelection] = None
    ) -> ResultEnvelope:
        return await self._query(
            self._naming.list_query(self.entity_type), fields, {"where": {field: value}}
        )

    async def find_where(
        self, where: Mapping[str, Any], fields: Optional[FieldSelection] = None
    ) -> ResultEnvelope:
        """
        Retrieve entities matching a where-map.

        Example:
            await repo.find_where({"status": "active", "age": [">=", 21]})
        """
        return await self._query(
            self._naming.list_query(self.entity_type), fields, {"where": where}
        )

    async def find_where_in(
        self, field: str, values: Iterable[Any], fields: Optional[FieldSelection] = None
    ) -> ResultEnvelope:
        return await self.find_where({field: [Operator.IN, list(values)]}, fields)

    async def find_where_not_in(
        self, field: str, values: Iterable[Any], fields: Optional[FieldSelection] = None
    ) -> ResultEnvelope:
        return await self.find_where({field: [Operator.NOT_IN, list(values)]}, fields)

    async def first(
        self,
        where: Optional[Mapping[str, Any]] = None,
        fields: Optional[FieldSelection] = None,
        count: int = 1,
    ) -> ResultEnvelope:
        """Retrieve the first `count` entities matching a where-map."""
        return await self._query(
            self._naming.list_query(self.entity_type),
            fields,
            {"where": where, "limit": count},
        )

    async def pluck(self, field: str) -> ResultEnvelope:
        """Retrieve the values of one field across matching entities."""

        def _values(raw: Dict[str, Any], items: Any) -> List[Any]:
            return [item.get(field) for item in items or [] if isinstance(item, Mapping)]

        return await self._query(
            self._naming.list_query(self.entity_type),
            [field],
            shape=_values,
            skip_presenter=True,
        )

    async def paginate(
        self,
        limit: Optional[int] = None,
        fields: Optional[FieldSelection] = None,
        offset: Optional[int] = None,
    ) -> ResultEnvelope:
        """
        Retrieve one page of entities together with the total count.

        The limit falls back to `set_limit()` and then to the configured
        pagination limit; the offset to `set_offset()` and then to 0.
        """
        if limit is None:
            limit = self._state.limit if self._state.limit is not None else self._config.pagination_limit
        if offset is None:
            offset = self._state.offset if self._state.offset is not None else 0
        meta_name = self._naming.meta_query(self.entity_type)

        def _page(raw: Dict[str, Any], items: Any) -> Page:
            meta = raw.get(meta_name) or {}
            return Page(
                data=list(items or []),
                count=meta.get("count") if isinstance(meta, Mapping) else None,
                limit=limit,
                offset=offset,
            )

        return await self._query(
            self._naming.list_query(self.entity_type),
            fields,
            {"limit": limit, "offset": offset},
            shape=_page,
            include_meta=True,
        )

    async def simple_paginate(
        self, limit: Optional[int] = None, fields: Optional[FieldSelection] = None
    ) -> ResultEnvelope:
        return await self.paginate(limit, fields)

    # --- Mutations ---
    async def create(
        self, attributes: Mapping[str, Any], fields: Optional[FieldSelection] = None
    ) -> ResultEnvelope:
        """
        Create an entity.

        Raises:
            ValidationError: If the attached validator rejects the attributes.
        """
        attributes = prepare_for_transport(attributes)
        self._validate(attributes, ValidationRule.CREATE)
        return await self._mutate(
            self._naming.mutation(CREATE, self.entity_type),
            fields,
            {"data": attributes, "include_where": False},
        )

    async def update(
        self,
        attributes: Mapping[str, Any],
        id: Any,
        fields: Optional[FieldSelection] = None,
    ) -> ResultEnvelope:
        """
        Update the entity with the given id.

        Raises:
            ValidationError: If the attached validator rejects the attributes.
        """
        attributes = prepare_for_transport(attributes)
        self._validate(attributes, ValidationRule.UPDATE)
        return await self._mutate(
            self._naming.mutation(UPDATE, self.entity_type),
            fields,
            {"where": {self.id_field: id}, "data": attributes},
        )

    async def update_or_create(
        self,
        attributes: Mapping[str, Any],
        values: Optional[Mapping[str, Any]] = None,
        fields: Optional[FieldSelection] = None,
    ) -> ResultEnvelope:
        """
        Update the entity identified by `attributes`, or create it.

        The backend receives ``update: {attributes + values}`` and
        ``create: {attributes + values without the id field}``.
        """
        merged = {**prepare_for_transport(attributes), **prepare_for_transport(values or {})}
        self._validate(merged, ValidationRule.UPDATE)
        create_payload = {k: v for k, v in merged.items() if k != self.id_field}
        return await self._mutate(
            self._naming.mutation(UPDATE_OR_CREATE, self.entity_type),
            fields,
            {"extra": {"update": merged, "create": create_payload}, "include_where": False},
        )

    async def delete(self, id: Any) -> ResultEnvelope:
        """Delete the entity with the given id. The payload holds its id."""
        return await self._mutate(
            self._naming.mutation(DELETE, self.entity_type),
            [self.id_field],
            {"where": {self.id_field: id}},
            skip_presenter=True,
        )

    async def delete_where(self, where: Mapping[str, Any]) -> ResultEnvelope:
        """Delete every entity matching a where-map. The payload holds the count."""
        return await self._mutate(
            self._naming.delete_many(self.entity_type),
            ["count"],
            {"where": where},
            skip_presenter=True,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(entity_type={self.entity_type!r}, "
            f"criteria={len(self._criteria)}, state={self._state!r})"
        )
