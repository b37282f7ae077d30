"""Shared response envelope."""
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every successful response.

    Attributes:
        status: Always True for successful responses.
        status_code: HTTP status code mirrored in the body.
        data: Response payload.
    """
    status: bool = True
    status_code: int = 200
    data: T
