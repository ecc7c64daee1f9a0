# src/graphql_repository/base/config.py
import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

log = logging.getLogger(__name__)


class RequestParams(BaseModel):
    """Names of the request parameters read by request criteria."""

    search: str = "search"
    search_fields: str = "searchFields"
    filter: str = "filter"
    order_by: str = "orderBy"
    sorted_by: str = "sortedBy"
    with_: str = Field("with", alias="with")
    search_join: str = "searchJoin"
    limit: str = "limit"
    offset: str = "offset"

    model_config = ConfigDict(populate_by_name=True)


class RepositoryConfig(BaseSettings):
    """
    Settings shared by repositories.

    Values can be passed explicitly or read from the environment using the
    ``GRAPHQL_REPOSITORY_`` prefix (``GRAPHQL_REPOSITORY_END_POINT``,
    ``GRAPHQL_REPOSITORY_PARAMS__SEARCH`` ...).
    """

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_REPOSITORY_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    end_point: Optional[str] = None
    api_key: Optional[SecretStr] = None
    timeout: float = 10.0
    pagination_limit: int = 15
    accepted_conditions: List[str] = Field(default_factory=lambda: ["=", "like"])
    params: RequestParams = Field(default_factory=RequestParams)
    protocol_name: str = "GraphQL"
    order_by_format: str = "ORDER_{field}_{direction}"
    list_prefix: str = ""

    @field_validator("pagination_limit")
    @classmethod
    def _positive_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("pagination_limit must be a positive integer")
        return value

    @field_validator("accepted_conditions")
    @classmethod
    def _normalize_conditions(cls, value: List[str]) -> List[str]:
        return [c.strip().lower() for c in value if c and c.strip()]

    def require_transport_settings(self) -> None:
        """
        Raises:
            ConfigurationError: If the end point or the API key is missing.
        """
        if not self.end_point:
            raise ConfigurationError(
                f"End point for {self.protocol_name} must be configured"
            )
        if self.api_key is None or not self.api_key.get_secret_value():
            raise ConfigurationError(
                f"API key for {self.protocol_name} must be configured"
            )
        log.debug(f"Transport settings present for end point '{self.end_point}'")
