class NexusException(Exception):
    """Base exception for the business API"""

    pass


class UnauthorizedException(NexusException):
    """Raised when JWT validation fails"""

    pass


class NotFoundException(NexusException):
    """Raised when resource not found (or belongs to another organization)"""

    pass


class ForbiddenException(NexusException):
    """Raised when the caller's role does not allow the operation"""

    pass


class ValidationException(NexusException):
    """Raised for business logic validation errors"""

    pass


class ConflictException(NexusException):
    """Raised when a unique business key is already taken"""

    pass
