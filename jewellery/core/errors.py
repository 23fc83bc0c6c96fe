from typing import List, Optional


class ServiceError(Exception):
    """A request-scoped failure that services report back in the envelope."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class NotFoundError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class ValidationFailed(ServiceError):
    pass
