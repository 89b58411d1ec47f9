"""
Session-scoped clients and the per-session registry holding them.

A client is identified by its type (what kind of helper it is) and an
identifier unique within that type. Each session owns its own ClientHolder;
holders are never shared between sessions.
"""
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Self

from foundation.exceptions import FoundationException

if TYPE_CHECKING:
    from foundation.session import Session

__all__ = ['Client', 'ClientHolder']

logger = logging.getLogger(__name__)


class Client:
    """Base class for session clients.

    Subclasses set `client_type` and return their identifier from
    `get_client_identifier()`.
    """

    client_type: str = 'client'

    def __init__(self) -> None:
        self._session: 'Session | None' = None

    def get_client_type(self) -> str:
        return self.client_type

    def get_client_identifier(self) -> str:
        return type(self).__qualname__

    def initialize(self, session: 'Session') -> None:
        """Attach the client to the session registering it.
        """
        self._session = session

    def shutdown(self) -> None:
        """Release resources held by the client. No-op by default.
        """

    def get_session(self) -> 'Session':
        if self._session is None:
            raise FoundationException(
                f'Client {self.get_client_identifier()!r} is not initialized')
        return self._session

    def __repr__(self) -> str:
        return f'{type(self).__name__}(type={self.get_client_type()!r}, identifier={self.get_client_identifier()!r})'


class ClientHolder:
    """Registry of clients indexed by type, then identifier.
    """

    def __init__(self) -> None:
        self._clients: dict[str, dict[str, Client]] = {}

    def add(self, client: Client) -> Self:
        client_type = client.get_client_type()
        identifier = client.get_client_identifier()
        self._clients.setdefault(client_type, {})[identifier] = client
        logger.debug(f'Registered client {identifier!r} for type {client_type!r}')
        return self

    def has(self, client_type: str, identifier: str) -> bool:
        return identifier in self._clients.get(client_type, {})

    def get(self, client_type: str, identifier: str) -> Client | None:
        return self._clients.get(client_type, {}).get(identifier)

    def get_all_for(self, client_type: str) -> dict[str, Client]:
        return dict(self._clients.get(client_type, {}))

    def clear(self, client_type: str, identifier: str) -> Self:
        """Shut down and remove one client, if present.
        """
        client = self._clients.get(client_type, {}).pop(identifier, None)
        if client is not None:
            client.shutdown()
            if not self._clients[client_type]:
                del self._clients[client_type]
        return self

    def shutdown(self) -> list[Exception]:
        """Shut down every client and empty the registry.

        Every client is given a chance to shut down; errors are collected and
        returned rather than interrupting the loop.
        """
        errors: list[Exception] = []
        for client_type, clients in self._clients.items():
            for identifier, client in clients.items():
                try:
                    client.shutdown()
                except Exception as e:
                    logger.warning(f'Error shutting down client {identifier!r} ({client_type}): {e}')
                    errors.append(e)
        self._clients.clear()
        return errors

    def __len__(self) -> int:
        return sum(len(clients) for clients in self._clients.values())

    def __iter__(self) -> Iterator[Client]:
        for clients in self._clients.values():
            yield from clients.values()
