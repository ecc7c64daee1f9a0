# tests/conftest.py
import logging
from typing import Any, Dict, List, Optional

import pytest
from pydantic import BaseModel, Field, field_validator

from graphql_repository import (
    GraphQLRepository,
    InMemoryTransport,
    PydanticValidator,
    RepositoryConfig,
)

# Silence verbose loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

TEST_END_POINT = "https://api.example.test/graphql"
TEST_API_KEY = "test-api-key"


# --- Logger Fixture ---


@pytest.fixture(scope="session")
def logger():
    """Create a test logger."""
    _logger = logging.getLogger("test_graphql_repo_logger")
    if not _logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        handler.setLevel(logging.DEBUG)
        _logger.addHandler(handler)
        _logger.setLevel(logging.DEBUG)
        _logger.propagate = False
    return logging.LoggerAdapter(_logger, {})


# --- Test Entities ---


class Owner(BaseModel):
    """Nested relation of a company."""

    id: str
    name: Optional[str] = None


class Company(BaseModel):
    """Presented company entity."""

    id: Optional[str] = None
    name: str
    status: str = "active"
    employees: int = 0
    tags: List[str] = Field(default_factory=list)
    owner: Optional[Owner] = None


class CompanyInput(BaseModel):
    """Attributes accepted when creating a company."""

    name: str
    status: str = "active"
    employees: int = 0

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name must not be blank!")
        return value

    @field_validator("employees")
    @classmethod
    def employees_not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Employees must not be negative!")
        return value


class CompanyRepository(GraphQLRepository[Dict[str, Any]]):
    entity_type = "Company"
    field_searchable = {"name": "like", "status": "=", "employees": ">="}
    fields = ["id", "name", "status"]
    field_sets = {
        "compact": ["id", "name"],
        "owner": ["id", "name"],
    }


class ValidatedCompanyRepository(CompanyRepository):
    def validator(self):
        return PydanticValidator(CompanyInput)


# --- Fixtures ---


@pytest.fixture
def config() -> RepositoryConfig:
    return RepositoryConfig(end_point=TEST_END_POINT, api_key=TEST_API_KEY)


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def company_model():
    return Company


@pytest.fixture
def company_input_model():
    return CompanyInput


@pytest.fixture
def repository_class():
    return CompanyRepository


@pytest.fixture
def repository(config, transport) -> CompanyRepository:
    return CompanyRepository(config, transport=transport)


@pytest.fixture
def validated_repository(config, transport) -> ValidatedCompanyRepository:
    return ValidatedCompanyRepository(config, transport=transport)


@pytest.fixture
def companies() -> List[Dict[str, Any]]:
    return [
        {"id": "c1", "name": "Acme", "status": "active"},
        {"id": "c2", "name": "Globex", "status": "inactive"},
        {"id": "c3", "name": "Initech", "status": "active"},
    ]
