"""
Foundation-specific exception classes.
"""
import psycopg


class FoundationException(Exception):
    """Base class for all foundation errors.
    """


class MissingConfiguration(FoundationException, KeyError):
    """A mandatory configuration key is absent.
    """

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f'Mandatory configuration parameter {self.key!r} is missing'


class ConnectionFailure(FoundationException):
    """Error establishing or maintaining database connection.
    """


class ClientNotFound(FoundationException):
    """No client registered under the requested type and identifier.
    """

    def __init__(self, client_type: str, identifier: str) -> None:
        super().__init__(f'No client {identifier!r} registered for type {client_type!r}')
        self.client_type = client_type
        self.identifier = identifier


class ConverterNotFound(FoundationException):
    """No converter registered under the requested name or type.
    """


class ValidationError(FoundationException, ValueError):
    """Error in input validation.
    """


class InvalidPageSize(ValidationError):
    """Pager built with fewer than one result per page.
    """


class InvalidPage(ValidationError):
    """Pager built with a page index lower than 1.
    """


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    ConnectionFailure,
    )
