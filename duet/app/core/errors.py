class DomainError(Exception):
    """Base domain error."""


class ValidationError(DomainError):
    pass


class PersistenceError(DomainError):
    """The record store rejected a read or write."""


class SessionClosed(DomainError):
    """An event arrived for a connection session that has already closed."""
