import asyncio
import copy
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Union

from graphql_repository.base.exceptions import TransportError
from graphql_repository.base.interfaces import Document, Transport

Responder = Callable[[Document], Dict[str, Any]]


class InMemoryTransport(Transport):
    """
    Transport that records executed documents and replies without a network.

    Replies come from a queue filled with `queue()`, falling back to the
    `responder` callable. Queued exceptions are raised instead of returned.
    """

    def __init__(self, responder: Optional[Responder] = None):
        self._responder = responder
        self._replies: Deque[Union[Dict[str, Any], Exception]] = deque()
        self.documents: List[Document] = []

    def queue(self, *replies: Union[Dict[str, Any], Exception]) -> "InMemoryTransport":
        self._replies.extend(replies)
        return self

    def fail_with(self, message: str) -> "InMemoryTransport":
        return self.queue(TransportError(message))

    @property
    def last_document(self) -> Optional[Document]:
        return self.documents[-1] if self.documents else None

    async def execute(self, document: Document) -> Dict[str, Any]:
        await asyncio.sleep(0)
        self.documents.append(copy.deepcopy(document))

        if self._replies:
            reply = self._replies.popleft()
        elif self._responder is not None:
            reply = self._responder(document)
        else:
            reply = {document.operation: None}

        if isinstance(reply, Exception):
            raise reply
        return copy.deepcopy(reply)
