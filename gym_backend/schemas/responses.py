from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar('T')


class ErrorInfo(BaseModel):
    message: str
    error_code: str | None = None
    status_code: int = 500


class ServiceResponse(BaseModel, Generic[T]):
    """Uniform result of every scheduling operation."""

    is_successful: bool = True
    data: T | None = None
    message: str | None = None
    error: ErrorInfo | None = None
