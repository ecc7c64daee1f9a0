# tests/base/test_search.py

import logging

import pytest

from graphql_repository.base.exceptions import UnacceptableFieldsError
from graphql_repository.base.search import (
    parse_search_data,
    parse_search_value,
    resolve_fields,
    split_field_list,
    string_is_boolean,
    string_to_boolean,
)


# --- Boolean literals ---


@pytest.mark.parametrize("token", ["true", "TRUE", "1", "yes", "on", " On "])
def test_true_tokens(token):
    assert string_is_boolean(token)
    assert string_to_boolean(token) is True


@pytest.mark.parametrize("token", ["false", "0", "no", "off", "False"])
def test_false_tokens(token):
    assert string_is_boolean(token)
    assert string_to_boolean(token) is False


def test_non_boolean_strings():
    assert not string_is_boolean("acme")
    assert not string_is_boolean("2")
    assert not string_is_boolean(None)
    assert not string_is_boolean(True)


# --- parse_search_data ---


def test_parse_search_data_pairs_and_coerces_booleans():
    assert parse_search_data("name:acme;active:true") == {
        "name": "acme",
        "active": True,
    }


def test_parse_search_data_skips_malformed_segment(caplog):
    caplog.set_level(logging.WARNING, logger="graphql_repository.base.search")
    # The library logger does not propagate, attach caplog's handler directly
    library_logger = logging.getLogger("graphql_repository")
    library_logger.addHandler(caplog.handler)
    try:
        result = parse_search_data("a:1;bad;b:2")
    finally:
        library_logger.removeHandler(caplog.handler)

    assert result == {"a": True, "b": "2"}
    assert "bad" in caplog.text


def test_parse_search_data_without_colon_is_empty():
    assert parse_search_data("acme") == {}
    assert parse_search_data("") == {}
    assert parse_search_data(None) == {}


def test_parse_search_data_splits_on_first_colon_only():
    assert parse_search_data("url:http://acme.test") == {"url": "http://acme.test"}


def test_parse_search_data_last_value_wins():
    assert parse_search_data("name:a;name:b") == {"name": "b"}


# --- parse_search_value ---


def test_parse_search_value_bare_expression():
    assert parse_search_value("acme") == "acme"


def test_parse_search_value_first_unqualified_segment():
    assert parse_search_value("name:acme;global;other") == "global"


def test_parse_search_value_all_qualified():
    assert parse_search_value("name:acme;status:active") is None
    assert parse_search_value(None) is None


# --- split_field_list ---


def test_split_field_list_accepts_strings_and_iterables():
    assert split_field_list("id;name;") == ["id", "name"]
    assert split_field_list(["id", "name"]) == ["id", "name"]
    assert split_field_list(None) is None


# --- resolve_fields ---


def test_resolve_fields_list_defaults_to_equality():
    assert resolve_fields(["name", "email"]) == {"name": "=", "email": "="}


def test_resolve_fields_applies_accepted_override():
    result = resolve_fields(["name", "email"], "name:like")
    assert result == {"name": "like", "email": "="}


def test_resolve_fields_ignores_unaccepted_condition():
    assert resolve_fields({"name": "="}, ["name:>"]) == {"name": "="}


def test_resolve_fields_ignores_undeclared_requested_field():
    result = resolve_fields(["name", "email"], "name;phone:like")
    assert result == {"name": "=", "email": "="}


def test_resolve_fields_rejects_when_nothing_matches():
    with pytest.raises(UnacceptableFieldsError) as exc_info:
        resolve_fields(["name"], ["phone"])
    assert exc_info.value.fields == ["phone"]
    assert "phone" in str(exc_info.value)


def test_resolve_fields_custom_accepted_conditions():
    result = resolve_fields({"age": "="}, "age:>=", accepted_conditions=["=", ">="])
    assert result == {"age": ">="}


def test_resolve_fields_mixed_declaration():
    result = resolve_fields(["name", ("age", " >= ")])
    assert result == {"name": "=", "age": ">="}


def test_resolve_fields_does_not_mutate_declaration():
    declared = {"name": "="}
    resolve_fields(declared, "name:like")
    assert declared == {"name": "="}
