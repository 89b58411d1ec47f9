"""
Session: one connection plus the clients bound to it.

Session classes are registered by name so a builder can select one from
configuration (`class:session`) without being subclassed.
"""
import logging
from typing import Any, Self

from foundation.client import Client, ClientHolder
from foundation.connection import Connection
from foundation.exceptions import ClientNotFound, FoundationException

logger = logging.getLogger(__name__)

# Registry of session name -> session class
# Defined here to avoid circular imports (session subclasses import from base)
_SESSION_REGISTRY: dict[str, type['Session']] = {}


def register_session(name: str):
    """Decorator to register a session class under a name.

    Usage:
        @register_session('reporting')
        class ReportingSession(Session):
            ...
    """
    def decorator(cls: type['Session']) -> type['Session']:
        _SESSION_REGISTRY[name] = cls
        return cls
    return decorator


@register_session('default')
class Session:
    """Bound database interaction context.

    Owns its connection and client holder exclusively. The stamp, when
    given, tags this session instance and never changes.
    """

    def __init__(self, connection: Connection, client_holder: ClientHolder | None = None,
                 stamp: str | None = None) -> None:
        self._connection = connection
        self._client_holder = client_holder if client_holder is not None else ClientHolder()
        self._stamp = stamp
        self._is_shutdown = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return f'{type(self).__name__}(stamp={self._stamp!r}, connection={self._connection!r})'

    def get_stamp(self) -> str | None:
        return self._stamp

    def get_connection(self) -> Connection:
        return self._connection

    def get_client_holder(self) -> ClientHolder:
        return self._client_holder

    def is_shutdown(self) -> bool:
        return self._is_shutdown

    def _check_shutdown(self) -> None:
        if self._is_shutdown:
            raise FoundationException(f'Session {self._stamp!r} has been shut down')

    def register_client(self, client: Client) -> Self:
        """Initialize the client with this session and add it to the holder.
        """
        self._check_shutdown()
        client.initialize(self)
        self._client_holder.add(client)
        return self

    def get_client(self, client_type: str, identifier: str) -> Client | None:
        self._check_shutdown()
        return self._client_holder.get(client_type, identifier)

    def get_client_or_raise(self, client_type: str, identifier: str) -> Client:
        client = self.get_client(client_type, identifier)
        if client is None:
            raise ClientNotFound(client_type, identifier)
        return client

    def shutdown(self) -> None:
        """Shut down clients, then close the connection.
        """
        if self._is_shutdown:
            return
        errors = self._client_holder.shutdown()
        self._connection.close()
        self._is_shutdown = True
        logger.debug(f'Session {self._stamp!r} shut down ({len(errors)} client errors)')
