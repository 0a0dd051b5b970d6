"""
Custom Exceptions
HTTP errors raised by the EDI routes
Source: https://fastapi.tiangolo.com/tutorial/handling-errors/
"""

from fastapi import HTTPException, status


class EDIProcessingError(HTTPException):
    """Raised when an EDI operation fails unexpectedly"""

    def __init__(self, operation: str, errors: list[str] | None = None):
        detail = f"Failed to {operation}"
        if errors:
            detail = f"{detail}: {'; '.join(errors)}"
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )


class EDIContentTooLargeError(HTTPException):
    """Raised when submitted EDI text exceeds the configured limit"""

    def __init__(self, length: int, limit: int):
        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"EDI content is {length} characters; limit is {limit}",
        )
