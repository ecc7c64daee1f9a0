# tests/graphql/test_naming.py

import pytest

from graphql_repository.graphql.naming import CREATE, DELETE, UPDATE, UPDATE_OR_CREATE, OperationNaming


@pytest.fixture
def naming():
    return OperationNaming()


@pytest.mark.parametrize(
    "entity_type, list_query, single_query",
    [
        ("Company", "companies", "company"),
        ("UserProfile", "userProfiles", "userProfile"),
        ("user_profile", "userProfiles", "userProfile"),
        ("Person", "people", "person"),
    ],
)
def test_query_names(naming, entity_type, list_query, single_query):
    assert naming.list_query(entity_type) == list_query
    assert naming.single_query(entity_type) == single_query


def test_mutation_names(naming):
    assert naming.mutation(CREATE, "Company") == "createCompany"
    assert naming.mutation(UPDATE, "UserProfile") == "updateUserProfile"
    assert naming.mutation(DELETE, "Company") == "deleteCompany"
    assert naming.mutation(UPDATE_OR_CREATE, "Company") == "updateOrCreateCompany"
    assert naming.delete_many("Company") == "deleteManyCompanies"


def test_meta_query(naming):
    assert naming.meta_query("Company") == "_companiesMeta"


def test_list_prefix():
    naming = OperationNaming(list_prefix="all")
    assert naming.list_query("Company") == "allCompanies"
    assert naming.meta_query("Company") == "_allCompaniesMeta"
    # Single queries are unaffected
    assert naming.single_query("Company") == "company"
