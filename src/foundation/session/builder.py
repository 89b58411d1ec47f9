"""
Session factory.

`SessionBuilder` creates and configures sessions. `build_session()` runs a
fixed pipeline and cannot be overridden; each step it calls can be:

1. `pre_configure()`              last chance to derive configuration
2. mandatory keys                 `dsn`, `connection:configuration`, `connection:persist`
3. `create_connection()`          the session's Connection
4. `create_client_holder()`       a fresh ClientHolder per session
5. `create_session()`             class chosen by `class:session`
6. `post_configure(session)`      register default clients

If a mandatory key is missing, nothing is created: no connection, no client
holder, no session.

The converter holder is created once per builder and handed by reference to
everything the builder produces. Register converters in
`initialize_converter_holder()`, then treat the holder as read-mostly.

A builder is reusable but not thread-safe: serialize `build_session()` and
`add_parameter()` calls, or give each thread its own builder.
"""
import logging
from collections.abc import Mapping
from typing import Any, Self, final

from foundation.client import ClientHolder
from foundation.connection import Connection
from foundation.converter_holder import ConverterHolder
from foundation.parameter_holder import ParameterHolder
from foundation.session.base import Session
from foundation.utils import get_default_timezone

__all__ = ['SessionBuilder']

logger = logging.getLogger(__name__)

DEFAULT_SESSION_CLASS = 'default'

_SEALED_METHODS = ('build_session',)


class SessionBuilder:
    """Configurable session factory, meant to be subclassed.

    Caller configuration is laid over `get_default_configuration()`; caller
    entries win on conflicting keys. The merge is shallow: a caller-supplied
    `connection:configuration` replaces the default mapping entirely.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name in _SEALED_METHODS:
            if getattr(cls, name) is not getattr(SessionBuilder, name):
                raise TypeError(f'{cls.__qualname__} cannot override {name}(); '
                                f'override the pipeline steps instead')

    def __init__(self, configuration: Mapping[str, Any] | None = None,
                 converter_holder: ConverterHolder | None = None) -> None:
        self._configuration = ParameterHolder({
            **self.get_default_configuration(),
            **dict(configuration or {}),
        })
        if converter_holder is None:
            converter_holder = ConverterHolder()

        self.initialize_converter_holder(converter_holder)
        self._converter_holder = converter_holder

    def add_parameter(self, name: str, value: Any) -> Self:
        """Set a configuration parameter. Validation happens at build time.
        """
        self._configuration.set_parameter(name, value)
        return self

    def get_converter_holder(self) -> ConverterHolder:
        return self._converter_holder

    def get_configuration(self) -> ParameterHolder:
        return self._configuration

    @final
    def build_session(self, stamp: str | None = None) -> Session:
        """Build a new session.
        """
        self.pre_configure()
        dsn = self._configuration.must_have('dsn').get_parameter('dsn')
        connection_configuration = (
            self._configuration
            .must_have('connection:configuration')
            .get_parameter('connection:configuration')
        )
        persist = (
            self._configuration
            .must_have('connection:persist')
            .get_parameter('connection:persist')
        )

        connection = self.create_connection(dsn, persist, connection_configuration)
        client_holder = self.create_client_holder()
        session = self.create_session(connection, client_holder, stamp)
        self.post_configure(session)
        logger.debug(f'Built {type(session).__name__} with stamp {stamp!r}')

        return session

    def get_default_configuration(self) -> dict[str, Any]:
        """Default configuration for new sessions.

        Always provides `connection:configuration` and `connection:persist`,
        never `dsn`.
        """
        return {
            'connection:configuration': {
                'bytea_output': 'hex',
                'intervalstyle': 'ISO_8601',
                'datestyle': 'ISO',
                'standard_conforming_strings': 'true',
                'timezone': get_default_timezone(),
            },
            'connection:persist': False,
        }

    def pre_configure(self) -> None:
        """Hook run before each build. No-op by default.
        """

    def create_connection(self, dsn: str, persist: bool,
                          connection_configuration: Mapping[str, Any]) -> Connection:
        return Connection(dsn, persist, connection_configuration)

    def create_client_holder(self) -> ClientHolder:
        return ClientHolder()

    def create_session(self, connection: Connection, client_holder: ClientHolder,
                       stamp: str | None) -> Session:
        """Instantiate the session class named by `class:session`.
        """
        from foundation.session import get_session_class

        session_class = get_session_class(
            self._configuration.get_parameter('class:session', DEFAULT_SESSION_CLASS))

        return session_class(connection, client_holder, stamp)

    def post_configure(self, session: Session) -> None:
        """Hook run on each new session, for client registration. No-op by default.
        """

    def initialize_converter_holder(self, converter_holder: ConverterHolder) -> None:
        """Hook run once at construction to register converters. No-op by default.
        """
