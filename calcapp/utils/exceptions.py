"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes raised by services and mapped by FastAPI
to HTTP responses.

Usage:
    from calcapp.utils.exceptions import NotFoundError, DuplicateError
    raise NotFoundError("Product not found")
    raise DuplicateError("A category with this code already exists")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found — 요청한 레코드가 없을 때.

    Raised when a requested record (calculation, product, state, ...) does not exist.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict — 고유 제약 위반 시.

    Raised when a unique code, name or description is already used.
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden — 권한 부족 시.

    Raised when the authenticated user lacks the required role, or when a
    calculation in a non-editable state is modified.
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized — 인증 실패 시."""

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request — 비즈니스 규칙 위반 시.

    Raised when the request is valid for Pydantic but breaks a business rule
    (e.g. deleting a state still used by calculations).
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UpstreamError(HTTPException):
    """502 Bad Gateway — 외부 서비스 오류 시.

    Raised when a third-party HTTP service (translation) fails.
    """

    def __init__(self, detail: str = "Upstream service error") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
