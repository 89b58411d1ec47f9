"""
Tests for Session and the session class registry.
"""
import config
import pytest
from foundation.client import Client, ClientHolder
from foundation.connection import Connection, ConnectionStatus
from foundation.exceptions import ClientNotFound, FoundationException
from foundation.exceptions import ValidationError
from foundation.session import Session, get_available_sessions
from foundation.session import get_session_class, is_registered_session
from foundation.session import register_session


class Greeter(Client):
    client_type = 'greeter'

    def __init__(self, name):
        super().__init__()
        self.name = name
        self.closed = False

    def get_client_identifier(self):
        return self.name

    def shutdown(self):
        self.closed = True


@pytest.fixture
def connection(mock_engine_factory):
    return Connection(config.postgresql.dsn, engine_factory=mock_engine_factory)


def test_session_holds_its_parts(connection):
    holder = ClientHolder()
    session = Session(connection, holder, 'stamp-1')

    assert session.get_connection() is connection
    assert session.get_client_holder() is holder
    assert session.get_stamp() == 'stamp-1'
    assert session.is_shutdown() is False


def test_session_creates_holder_when_missing(connection):
    session = Session(connection)

    assert isinstance(session.get_client_holder(), ClientHolder)
    assert session.get_stamp() is None


def test_empty_holder_is_kept(connection):
    """An empty holder is falsy but is still the one handed in"""
    holder = ClientHolder()
    assert Session(connection, holder).get_client_holder() is holder


def test_register_client(connection):
    session = Session(connection)
    greeter = Greeter('hello')

    assert session.register_client(greeter) is session
    assert greeter.get_session() is session
    assert session.get_client('greeter', 'hello') is greeter
    assert session.get_client('greeter', 'bye') is None


def test_get_client_or_raise(connection):
    session = Session(connection)

    with pytest.raises(ClientNotFound) as exc_info:
        session.get_client_or_raise('greeter', 'hello')

    assert exc_info.value.client_type == 'greeter'
    assert exc_info.value.identifier == 'hello'


def test_shutdown(connection):
    session = Session(connection)
    greeter = Greeter('hello')
    session.register_client(greeter)
    connection.get_handler()

    session.shutdown()

    assert greeter.closed is True
    assert session.is_shutdown() is True
    assert connection.get_connection_status() is ConnectionStatus.CLOSED
    with pytest.raises(FoundationException, match='shut down'):
        session.get_client('greeter', 'hello')
    with pytest.raises(FoundationException):
        session.register_client(Greeter('late'))


def test_shutdown_is_idempotent(mocker):
    connection = mocker.create_autospec(Connection, instance=True)
    session = Session(connection)

    session.shutdown()
    session.shutdown()

    connection.close.assert_called_once()


def test_shutdown_survives_client_errors(connection):
    class Failing(Greeter):
        def shutdown(self):
            raise RuntimeError('cannot close')

    session = Session(connection)
    session.register_client(Failing('bad'))
    session.register_client(Greeter('good'))

    session.shutdown()

    assert session.is_shutdown() is True


def test_context_manager(connection):
    with Session(connection, stamp='ctx') as session:
        assert session.is_shutdown() is False

    assert session.is_shutdown() is True


def test_default_session_registered():
    assert get_session_class('default') is Session
    assert is_registered_session('default')
    assert 'default' in get_available_sessions()


def test_register_session():
    @register_session('readonly')
    class ReadOnlySession(Session):
        pass

    assert get_session_class('readonly') is ReadOnlySession
    assert 'readonly' in get_available_sessions()


def test_unknown_session_name():
    with pytest.raises(ValidationError, match='Available'):
        get_session_class('nope')


def test_session_class_passthrough():
    class Custom(Session):
        pass

    assert get_session_class(Custom) is Custom


def test_non_session_class_rejected():
    with pytest.raises(ValidationError):
        get_session_class(dict)


if __name__ == '__main__':
    __import__('pytest').main([__file__])
