# src/graphql_repository/base/result.py
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .exceptions import TransportError
from .interfaces import Presenter

log = logging.getLogger(__name__)

STATUS_SUCCESS = 1
STATUS_FAILURE = 0


@dataclass
class ResultEnvelope:
    """Uniform outcome of every repository operation."""

    status: int
    message: Optional[str] = None
    payload: Any = None

    def __post_init__(self):
        if self.status not in (STATUS_SUCCESS, STATUS_FAILURE):
            raise ValueError(f"Envelope status must be 1 or 0, got {self.status!r}")
        if self.status == STATUS_FAILURE and not self.message:
            raise ValueError("A failure envelope requires a message")

    @classmethod
    def success(cls, payload: Any = None) -> "ResultEnvelope":
        return cls(STATUS_SUCCESS, None, payload)

    @classmethod
    def failure(cls, message: str) -> "ResultEnvelope":
        return cls(STATUS_FAILURE, message, None)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        payload = self.payload
        if isinstance(payload, Page):
            payload = payload.to_dict()
        return {"status": self.status, "message": self.message, "payload": payload}


@dataclass
class Page:
    """One page of a paginated listing."""

    data: List[Any] = field(default_factory=list)
    count: Optional[int] = None
    limit: Optional[int] = None
    offset: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "meta": {"count": self.count, "limit": self.limit, "offset": self.offset},
        }


class ResultNormalizer:
    """
    Wraps raw transport results and transport errors into envelopes.

    Successful payloads are routed through the presenter (if any): list
    payloads element by element, pages through their `data`
    list, anything else as a single entity.
    """

    def __init__(self, protocol_name: str = "GraphQL", presenter: Optional[Presenter] = None):
        self.protocol_name = protocol_name
        self.presenter = presenter

    def normalize(self, result: Any, skip_presenter: bool = False) -> ResultEnvelope:
        if isinstance(result, TransportError):
            log.debug(f"Normalizing transport error into a failure envelope: {result.message}")
            return ResultEnvelope.failure(f"{self.protocol_name} error: {result.message}")
        if skip_presenter or self.presenter is None:
            return ResultEnvelope.success(result)
        return ResultEnvelope.success(self._present(result))

    def _present(self, result: Any) -> Any:
        if result is None:
            return None
        if isinstance(result, list):
            return [self.presenter.present(item) for item in result]
        if isinstance(result, Page):
            return replace(result, data=[self.presenter.present(item) for item in result.data])
        return self.presenter.present(result)
