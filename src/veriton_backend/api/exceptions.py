from fastapi import HTTPException, status
from typing import Any, Dict, Optional

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers or {"WWW-Authenticate": "Bearer"}
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthorized"

class ConflictException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_409_CONFLICT
        self.detail = detail or "Conflict"

class UnprocessableEntityException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = 422
        self.detail = detail or "Validation failed"

class InternalServerException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        self.detail = detail or "Internal server error"

def repository_error_to_http_exception(error: Exception) -> HTTPException:
    """Map a repository-level error onto the matching HTTP-shaped exception."""
    from veriton_backend.repositories.base import (
        DependencyConflictError,
        DuplicateError,
        NotFoundError,
        ValidationFailedError,
    )

    if isinstance(error, NotFoundError):
        # Missing and out-of-scope rows share one message
        return NotFoundException(detail=f"{error.entity_type} not found")
    elif isinstance(error, ValidationFailedError):
        return UnprocessableEntityException(detail={"message": str(error), "errors": error.errors})
    elif isinstance(error, DuplicateError):
        return ConflictException(detail={"entity": error.entity_type, "fields": sorted(error.criteria.keys())})
    elif isinstance(error, DependencyConflictError):
        return ConflictException(detail={"entity": error.entity_type, "dependents": error.dependents})
    else:
        return InternalServerException(detail=str(error))
