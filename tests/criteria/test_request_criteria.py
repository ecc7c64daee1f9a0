# tests/criteria/test_request_criteria.py

import pytest

from graphql_repository import ConditionsCriteria, RepositoryConfig, RequestCriteria
from graphql_repository.base.criteria import CRITERIA_REGISTRY
from graphql_repository.base.exceptions import UnacceptableFieldsError


def test_registered_under_request_key():
    assert CRITERIA_REGISTRY["request"] is RequestCriteria


@pytest.mark.asyncio
async def test_qualified_search_is_anded(repository, transport):
    repository.push_criteria(RequestCriteria({"search": "name:acme;status:active"}))
    await repository.all()
    assert transport.last_document.arguments == {
        "where": {"name_contains": "acme", "status": "active"}
    }


@pytest.mark.asyncio
async def test_search_fields_override_condition(repository, transport):
    repository.push_criteria(
        RequestCriteria({"search": "name:acme", "searchFields": "name:="})
    )
    await repository.all()
    assert transport.last_document.arguments == {"where": {"name": "acme"}}


@pytest.mark.asyncio
async def test_bare_search_value_builds_or_group(repository, transport):
    repository.push_criteria(RequestCriteria({"search": "acme"}))
    await repository.all()
    assert transport.last_document.arguments == {
        "where": {
            "OR": [
                {"name_contains": "acme"},
                {"status": "acme"},
                {"employees_gte": "acme"},
            ]
        }
    }


@pytest.mark.asyncio
async def test_search_join_and_forces_conjunction(repository, transport):
    repository.push_criteria(
        RequestCriteria({"search": "acme", "searchFields": "name", "searchJoin": "and"})
    )
    await repository.all()
    assert transport.last_document.arguments == {
        "where": {
            "name_contains": "acme",
            "status": "acme",
            "employees_gte": "acme",
        }
    }


@pytest.mark.asyncio
async def test_search_join_or_with_qualified_search(repository, transport):
    repository.push_criteria(
        RequestCriteria({"search": "name:acme;status:active", "searchJoin": "or"})
    )
    await repository.all()
    assert transport.last_document.arguments == {
        "where": {"OR": [{"name_contains": "acme"}, {"status": "active"}]}
    }


@pytest.mark.asyncio
async def test_unknown_search_fields_raise(repository):
    repository.push_criteria(RequestCriteria({"search": "acme", "searchFields": "phone"}))
    with pytest.raises(UnacceptableFieldsError):
        await repository.all()


@pytest.mark.asyncio
async def test_order_filter_limit_offset(repository, transport):
    repository.push_criteria(
        RequestCriteria(
            {
                "orderBy": "name",
                "sortedBy": "desc",
                "filter": "id;status",
                "limit": "10",
                "offset": "20",
            }
        )
    )
    await repository.all()
    document = transport.last_document
    assert document.fields == ["id", "status"]
    assert document.arguments == {"orderBy": "ORDER_name_DESC", "first": 10, "skip": 20}


@pytest.mark.asyncio
async def test_unknown_sort_direction_sorts_ascending(repository, transport):
    repository.push_criteria(RequestCriteria({"orderBy": "name", "sortedBy": "sideways"}))
    await repository.all()
    assert transport.last_document.arguments == {"orderBy": "ORDER_name_ASC"}


@pytest.mark.asyncio
async def test_named_filter_uses_field_set(repository, transport):
    repository.push_criteria(RequestCriteria({"filter": "compact"}))
    await repository.all()
    assert transport.last_document.fields == ["id", "name"]


@pytest.mark.asyncio
async def test_with_appends_relations(repository, transport):
    repository.push_criteria(RequestCriteria({"filter": "compact", "with": "owner;tags"}))
    await repository.all()
    assert transport.last_document.fields == [
        "id",
        "name",
        {"owner": ["id", "name"]},
        {"tags": ["id"]},
    ]


@pytest.mark.asyncio
async def test_invalid_limit_and_offset_are_ignored(repository, transport):
    repository.push_criteria(RequestCriteria({"limit": "ten", "offset": "-5"}))
    await repository.all()
    assert transport.last_document.arguments == {}


@pytest.mark.asyncio
async def test_custom_parameter_names(repository_class, transport):
    config = RepositoryConfig(
        end_point="https://x.test",
        api_key="k",
        params={"search": "q", "limit": "per_page"},
    )
    repo = repository_class(config, transport=transport)
    repo.push_criteria(RequestCriteria({"q": "status:active", "per_page": 3}))
    await repo.all()
    assert transport.last_document.arguments == {"where": {"status": "active"}, "first": 3}


@pytest.mark.asyncio
async def test_empty_params_change_nothing(repository, transport):
    repository.push_criteria("request")
    await repository.all()
    assert transport.last_document.arguments == {}
    assert transport.last_document.fields == ["id", "name", "status"]


@pytest.mark.asyncio
async def test_with_relations_added_once_across_queries(repository, transport):
    repository.push_criteria(RequestCriteria({"with": "owner"}))
    await repository.all()
    await repository.all()
    await repository.all()
    assert transport.last_document.fields == [
        "id",
        "name",
        "status",
        {"owner": ["id", "name"]},
    ]


@pytest.mark.asyncio
async def test_search_or_group_keeps_tenant_or_group(repository, transport):
    tenant_group = [{"tenant": "tenantA"}, {"tenant": "tenantB"}]
    repository.push_criteria(ConditionsCriteria({"OR": tenant_group}))
    repository.push_criteria(RequestCriteria({"search": "acme"}))
    expected = {
        "where": {
            "OR": tenant_group,
            "AND": [
                {
                    "OR": [
                        {"name_contains": "acme"},
                        {"status": "acme"},
                        {"employees_gte": "acme"},
                    ]
                }
            ],
        }
    }

    await repository.all()
    assert transport.last_document.arguments == expected

    # Criteria run again on the next query without piling up
    await repository.all()
    assert transport.last_document.arguments == expected


@pytest.mark.asyncio
async def test_failed_paginate_does_not_leak_meta(repository, transport):
    repository.push_criteria(RequestCriteria({"search": "acme", "searchFields": "phone"}))
    with pytest.raises(UnacceptableFieldsError):
        await repository.paginate()

    repository.pop_criteria("request")
    await repository.all()
    assert transport.last_document.include_meta is False
    assert transport.last_document.meta_operation is None
