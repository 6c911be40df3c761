"""Domain errors raised from the service layer.

These subclass ``HTTPException`` so routers can let them propagate and
FastAPI renders them with the right status code.
"""

from typing import Optional

from fastapi import HTTPException


class DomainError(HTTPException):
    """Base class for caller-fixable errors raised by the domain layer"""

    status_code_default = 400

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.status_code_default, detail=detail)

    def __str__(self) -> str:
        return str(self.detail)


class ValidationError(DomainError):
    """Malformed ids, empty required fields, invalid enum values"""

    status_code_default = 400


class NotFoundError(DomainError):
    status_code_default = 404

    @classmethod
    def for_resource(cls, resource: str, resource_id: Optional[str] = None) -> "NotFoundError":
        if resource_id:
            return cls(f"{resource} not found: {resource_id}")
        return cls(f"{resource} not found")


class ConflictError(DomainError):
    """Operation conflicts with the current state; the caller may retry with an override"""

    status_code_default = 409
