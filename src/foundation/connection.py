"""
Database connection handling with SQLAlchemy.

This module provides:
1. DSN parsing into a SQLAlchemy URL for the psycopg driver
2. The `Connection` class, opened lazily on first use and configured with
   session-level settings (`set_config(key, value, false)`)
3. A thread-safe registry of pooled engines backing persistent connections

Non-persistent connections get their own `NullPool` engine, so the wire
connection is really closed when the Connection is. Persistent connections
share one pooled engine per URL for the life of the process.
"""
import atexit
import enum
import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

import sqlalchemy as sa
from foundation.exceptions import ConnectionFailure, DbConnectionError
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

__all__ = [
    'Connection',
    'ConnectionStatus',
    'configure_connection',
    'create_url_from_dsn',
    'get_engine_for_url',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

DRIVERNAME = 'postgresql+psycopg'
SUPPORTED_SCHEMES = {'postgresql', 'postgres', 'pgsql', DRIVERNAME}

SET_CONFIG = sa.text('SELECT set_config(:name, :value, false)')

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


class ConnectionStatus(enum.Enum):
    NONE = 'none'
    OK = 'ok'
    BAD = 'bad'
    CLOSED = 'closed'


def create_url_from_dsn(dsn: str,
                        url_creator: Callable[[str], sa.URL] = sa.make_url) -> sa.URL:
    """Convert a DSN to a SQLAlchemy URL using the psycopg driver.

    Accepts `postgresql://`, `postgres://` and `pgsql://` schemes.
    """
    try:
        url = url_creator(dsn)
    except sa.exc.ArgumentError as e:
        raise ConnectionFailure(f'Could not parse dsn {dsn!r}: {e}') from e

    if url.drivername not in SUPPORTED_SCHEMES:
        raise ConnectionFailure(
            f'Unsupported dsn scheme {url.drivername!r}, expected one of {sorted(SUPPORTED_SCHEMES)}')

    return url.set(drivername=DRIVERNAME)


def get_engine_for_url(url: sa.URL, persist: bool = False,
                       engine_factory: Callable[..., Engine] = sa.create_engine,
                       **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given URL.

    Only persistent engines are registered; each non-persistent request gets
    a fresh `NullPool` engine.
    """
    if not persist:
        return engine_factory(url, poolclass=NullPool, **kwargs)

    key = url.render_as_string(hide_password=False)

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {url.host}/{url.database}')
            return _engine_registry[key]

        engine_kwargs: dict[str, Any] = {
            'pool_pre_ping': True,
            'pool_reset_on_return': 'rollback',
        }
        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new persistent engine for {url.host}/{url.database}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all persistent engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All persistent engines disposed')


atexit.register(dispose_all_engines)


def configure_connection(sa_connection: sa.engine.Connection,
                         configuration: Mapping[str, Any]) -> None:
    """Apply session settings to a freshly opened connection.
    """
    if not configuration:
        return

    for key, value in configuration.items():
        sa_connection.execute(SET_CONFIG, {'name': key, 'value': str(value)})
    sa_connection.commit()
    logger.debug(f'Applied connection settings: {", ".join(configuration)}')


class Connection:
    """Lazily opened PostgreSQL connection.

    Nothing touches the network until `get_handler()` is first called.
    """

    def __init__(self, dsn: str, persist: bool = False,
                 configuration: Mapping[str, Any] | None = None,
                 engine_factory: Callable[..., Engine] = sa.create_engine) -> None:
        self.url = create_url_from_dsn(dsn)
        self._persist = bool(persist)
        self._configuration = dict(configuration or {})
        self._engine_factory = engine_factory
        self._engine: Engine | None = None
        self._sa_connection: sa.engine.Connection | None = None
        self._status = ConnectionStatus.NONE

    def __repr__(self) -> str:
        return f'Connection(dsn={self.get_dsn()!r}, persist={self._persist}, status={self._status.value})'

    def get_dsn(self) -> str:
        """The DSN with the password masked.
        """
        return self.url.render_as_string(hide_password=True)

    def is_persistent(self) -> bool:
        return self._persist

    def get_configuration(self) -> dict[str, Any]:
        return dict(self._configuration)

    def get_connection_status(self) -> ConnectionStatus:
        if self._status is ConnectionStatus.OK and self._sa_connection is not None:
            if self._sa_connection.closed or self._sa_connection.invalidated:
                self._status = ConnectionStatus.BAD
        return self._status

    def get_handler(self) -> sa.engine.Connection:
        """Return the open SQLAlchemy connection, opening it on first call.
        """
        status = self.get_connection_status()
        if status is ConnectionStatus.NONE:
            self._launch()
        elif status is ConnectionStatus.BAD:
            raise ConnectionFailure(f'Connection to {self.get_dsn()!r} is in a bad state')
        elif status is ConnectionStatus.CLOSED:
            raise ConnectionFailure('Connection has been closed, no further queries can be sent')
        return self._sa_connection

    def _launch(self) -> None:
        self._engine = get_engine_for_url(self.url, self._persist, self._engine_factory)
        try:
            self._sa_connection = self._engine.connect()
            configure_connection(self._sa_connection, self._configuration)
        except (sa.exc.DBAPIError, *DbConnectionError) as e:
            self._status = ConnectionStatus.BAD
            if self._sa_connection is not None:
                self._sa_connection.close()
            raise ConnectionFailure(f'Error connecting to {self.get_dsn()!r}: {e}') from e
        self._status = ConnectionStatus.OK
        logger.debug(f'Opened {"persistent " if self._persist else ""}connection to {self.get_dsn()}')

    def close(self) -> None:
        """Close the connection. A closed connection cannot be reopened.
        """
        if self._sa_connection is not None and not self._sa_connection.closed:
            self._sa_connection.close()
            logger.debug(f'Connection closed: {self.get_dsn()}')
        self._sa_connection = None
        if self._engine is not None and not self._persist:
            self._engine.dispose()
        self._engine = None
        self._status = ConnectionStatus.CLOSED
