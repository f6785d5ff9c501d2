"""Mail adapters for the Access context."""

from access.infrastructure.mail.logging_dispatcher import LoggingMailDispatcher

__all__ = ["LoggingMailDispatcher"]
