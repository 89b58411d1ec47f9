"""
Session builder wiring the shared converter holder into every session.
"""
from foundation.converter_holder import ConverterClient
from foundation.session import Session, SessionBuilder

__all__ = ['FoundationSessionBuilder']


class FoundationSessionBuilder(SessionBuilder):
    """Registers a ConverterClient on each session it builds.

    All sessions from one builder reach the same ConverterHolder through
    `session.get_client('converter', 'holder')`.
    """

    def post_configure(self, session: Session) -> None:
        session.register_client(ConverterClient(self.get_converter_holder()))
