# tests/base/test_criteria.py

import pytest

from graphql_repository.base.criteria import (
    CRITERIA_REGISTRY,
    ConditionsCriteria,
    CriteriaChain,
    Criterion,
    register_criterion,
)
from graphql_repository.base.exceptions import RepositoryException
from graphql_repository.base.state import PendingQueryState


class LimitCriteria(Criterion):
    key = "test-limit"

    def __init__(self, limit: int = 5):
        self.limit = limit

    def apply(self, state, repository):
        state.limit = self.limit
        return state


class ActiveOnlyCriteria(Criterion):
    key = "test-active"

    def apply(self, state, repository):
        state.merge_where({"status": "active"})
        return state


class ReplacingCriteria(Criterion):
    key = "test-replacing"

    def apply(self, state, repository):
        replaced = state.copy()
        replaced.order_by = "ORDER_name_ASC"
        return replaced


class StubRepository:
    """Minimal stand-in exposing what criteria call back into."""

    def __init__(self):
        self.state = PendingQueryState()
        self.applied = []

    def apply_conditions(self, where):
        self.applied.append(where)
        self.state.merge_where(where)
        return self


@pytest.fixture
def stub_repository():
    return StubRepository()


# --- Criterion definition ---


def test_concrete_criterion_requires_key():
    with pytest.raises(RepositoryException):

        class KeylessCriteria(Criterion):
            def apply(self, state, repository):
                return state


def test_abstract_intermediate_may_omit_key():
    from abc import abstractmethod

    class BaseCustomCriteria(Criterion):
        @abstractmethod
        def apply(self, state, repository):
            pass

    assert BaseCustomCriteria.key == ""


def test_register_rejects_duplicate_key():
    @register_criterion
    class FirstCriteria(Criterion):
        key = "test-duplicate"

        def apply(self, state, repository):
            return state

    try:
        with pytest.raises(RepositoryException):

            @register_criterion
            class SecondCriteria(Criterion):
                key = "test-duplicate"

                def apply(self, state, repository):
                    return state

    finally:
        CRITERIA_REGISTRY.pop("test-duplicate", None)


# --- CriteriaChain ---


def test_push_and_list_in_order():
    chain = CriteriaChain()
    first, second = LimitCriteria(), ActiveOnlyCriteria()
    chain.push(first).push(second)
    assert chain.list() == [first, second]
    assert len(chain) == 2
    assert list(chain) == [first, second]


def test_push_rejects_non_criterion():
    with pytest.raises(RepositoryException):
        CriteriaChain().push(object())


def test_push_by_registered_key():
    chain = CriteriaChain().push("conditions")
    assert isinstance(chain.list()[0], ConditionsCriteria)


def test_push_unknown_key():
    with pytest.raises(RepositoryException):
        CriteriaChain().push("nope")


def test_pop_removes_every_entry_with_key():
    chain = CriteriaChain([LimitCriteria(1), ActiveOnlyCriteria(), LimitCriteria(2)])
    chain.pop(LimitCriteria)
    assert [c.key for c in chain] == ["test-active"]


def test_pop_by_instance_and_by_key():
    chain = CriteriaChain([LimitCriteria(1), ActiveOnlyCriteria()])
    chain.pop(LimitCriteria(99))
    chain.pop("test-active")
    assert len(chain) == 0


def test_pop_rejects_unrelated_type():
    with pytest.raises(TypeError):
        CriteriaChain().pop(42)


def test_reset_empties_chain():
    chain = CriteriaChain([LimitCriteria()])
    assert chain.reset().list() == []


def test_list_is_a_copy():
    chain = CriteriaChain([LimitCriteria()])
    chain.list().clear()
    assert len(chain) == 1


# --- apply_all ---


def test_apply_all_in_push_order(stub_repository):
    chain = CriteriaChain([LimitCriteria(3), LimitCriteria(7), ActiveOnlyCriteria()])
    state = chain.apply_all(stub_repository.state, stub_repository)
    assert state.limit == 7
    assert state.where == {"status": "active"}


def test_apply_all_skipped(stub_repository):
    chain = CriteriaChain([LimitCriteria(3)]).skip()
    assert chain.is_skipped
    state = chain.apply_all(stub_repository.state, stub_repository)
    assert state.limit is None

    chain.skip(False)
    assert chain.apply_all(stub_repository.state, stub_repository).limit == 3


def test_apply_all_adopts_replaced_state(stub_repository):
    original = stub_repository.state
    chain = CriteriaChain([ReplacingCriteria(), LimitCriteria(4)])
    state = chain.apply_all(original, stub_repository)
    assert state is not original
    assert stub_repository.state is state
    assert state.order_by == "ORDER_name_ASC"
    assert state.limit == 4
    assert original.limit is None


def test_conditions_criteria_applies_where(stub_repository):
    criterion = ConditionsCriteria({"tenant": "t1"})
    CriteriaChain([criterion]).apply_all(stub_repository.state, stub_repository)
    assert stub_repository.applied == [{"tenant": "t1"}]
    assert stub_repository.state.where == {"tenant": "t1"}


def test_conditions_criteria_without_where_is_noop(stub_repository):
    CriteriaChain([ConditionsCriteria()]).apply_all(stub_repository.state, stub_repository)
    assert stub_repository.applied == []


def test_criterion_repr():
    assert repr(ActiveOnlyCriteria()) == "ActiveOnlyCriteria(key='test-active')"
