"""공통 Pydantic 스키마 — Shared response schemas."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """범용 메시지 응답 스키마.

    Generic message response for actions without a resource body
    (logout, password change, messages).
    """

    message: str
