# src/graphql_repository/base/criteria.py
import logging
from abc import ABC, abstractmethod
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
    Union,
)

from .exceptions import RepositoryException
from .state import PendingQueryState

if TYPE_CHECKING:
    from graphql_repository.graphql.repository import GraphQLRepository

log = logging.getLogger(__name__)

C = TypeVar("C", bound="Criterion")


class Criterion(ABC):
    """
    A transform applied to a repository's pending query state before a query
    document is built.

    Concrete criteria declare a stable `key`; chains compare criteria by key,
    so two instances of the same criterion are interchangeable for `pop`.
    """

    key: str = ""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        # Abstract intermediates may leave the key empty
        if not getattr(cls.apply, "__isabstractmethod__", False) and not cls.key:
            raise RepositoryException(
                f"Criterion {cls.__name__} must define a non-empty 'key'"
            )

    @abstractmethod
    def apply(
        self, state: PendingQueryState, repository: "GraphQLRepository"
    ) -> PendingQueryState:
        """
        Mutate (or replace) the pending state. The repository handle may be
        used to call chained setters such as `apply_conditions` or `set_limit`.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"


CRITERIA_REGISTRY: Dict[str, Type[Criterion]] = {}


def register_criterion(cls: Type[C]) -> Type[C]:
    """Class decorator making a criterion pushable by its key."""
    existing = CRITERIA_REGISTRY.get(cls.key)
    if existing is not None and existing is not cls:
        raise RepositoryException(
            f"Criterion key '{cls.key}' is already registered by {existing.__name__}"
        )
    CRITERIA_REGISTRY[cls.key] = cls
    return cls


def _key_of(criterion: Union[Criterion, Type[Criterion], str]) -> str:
    if isinstance(criterion, str):
        return criterion
    if isinstance(criterion, Criterion):
        return criterion.key
    if isinstance(criterion, type) and issubclass(criterion, Criterion):
        return criterion.key
    raise TypeError(
        f"Expected a Criterion, Criterion class or key, got {type(criterion).__name__}"
    )


class CriteriaChain:
    """Ordered, mutable list of criteria applied in push order."""

    def __init__(self, criteria: Optional[List[Criterion]] = None):
        self._criteria: List[Criterion] = []
        self._skip = False
        for criterion in criteria or []:
            self.push(criterion)

    def push(self, criterion: Union[Criterion, str]) -> "CriteriaChain":
        if isinstance(criterion, str):
            cls = CRITERIA_REGISTRY.get(criterion)
            if cls is None:
                raise RepositoryException(f"No criterion registered under key '{criterion}'")
            criterion = cls()
        if not isinstance(criterion, Criterion):
            raise RepositoryException(
                f"Class {type(criterion).__name__} must be an instance of Criterion"
            )
        self._criteria.append(criterion)
        log.debug(f"Pushed criterion {criterion!r} ({len(self._criteria)} total)")
        return self

    def pop(self, criterion: Union[Criterion, Type[Criterion], str]) -> "CriteriaChain":
        key = _key_of(criterion)
        before = len(self._criteria)
        self._criteria = [c for c in self._criteria if c.key != key]
        log.debug(f"Popped {before - len(self._criteria)} criteria with key '{key}'")
        return self

    def list(self) -> List[Criterion]:
        return list(self._criteria)

    def skip(self, status: bool = True) -> "CriteriaChain":
        self._skip = status
        return self

    @property
    def is_skipped(self) -> bool:
        return self._skip

    def reset(self) -> "CriteriaChain":
        self._criteria = []
        return self

    def apply_all(
        self, state: PendingQueryState, repository: "GraphQLRepository"
    ) -> PendingQueryState:
        """
        Apply every criterion in order. Each criterion sees the mutations of
        the ones before it.
        """
        if self._skip:
            log.debug("Criteria skipped")
            return state
        for criterion in self._criteria:
            result = criterion.apply(state, repository)
            if result is not None and result is not state:
                state = result
                repository.state = state
        return state

    def __len__(self) -> int:
        return len(self._criteria)

    def __iter__(self) -> Iterator[Criterion]:
        return iter(list(self._criteria))


@register_criterion
class ConditionsCriteria(Criterion):
    """Applies a fixed where-map, e.g. to scope every query to a tenant."""

    key = "conditions"

    def __init__(self, where: Optional[Mapping[str, Any]] = None):
        self.where = dict(where or {})

    def apply(self, state: PendingQueryState, repository: "GraphQLRepository") -> PendingQueryState:
        if self.where:
            repository.apply_conditions(self.where)
        return state
