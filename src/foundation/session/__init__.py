"""
Session classes and the name -> class registry used by session builders.
"""
from foundation.exceptions import ValidationError
from foundation.session.base import _SESSION_REGISTRY
from foundation.session.base import Session as Session
from foundation.session.base import register_session as register_session
from foundation.session.builder import SessionBuilder as SessionBuilder


def _validate_session_name(name: str) -> None:
    """Raise ValidationError if name is not registered."""
    if name not in _SESSION_REGISTRY:
        available = list(_SESSION_REGISTRY.keys())
        raise ValidationError(f'Unknown session class: {name}. Available: {available}')


def get_session_class(name: str | type[Session]) -> type[Session]:
    """Get the session class registered under a name.

    A Session subclass is returned unchanged.
    """
    if isinstance(name, type):
        if not issubclass(name, Session):
            raise ValidationError(f'{name.__qualname__} is not a Session subclass')
        return name
    _validate_session_name(name)
    return _SESSION_REGISTRY[name]


def get_available_sessions() -> list[str]:
    """Return list of registered session names."""
    return list(_SESSION_REGISTRY.keys())


def is_registered_session(name: str) -> bool:
    """Check if a session name is registered."""
    return name in _SESSION_REGISTRY
