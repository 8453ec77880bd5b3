"""메일 서비스 — 알림 및 사용자 메시지 이메일.

Mail Service — Builds and sends the application e-mails: password reset
links, messages between users and calculation state notifications.
"""

import logging
from html import escape

import aiosmtplib

from calcapp.config import settings
from calcapp.models.calculation import Calculation
from calcapp.models.user import User
from calcapp.utils.email import send_email
from calcapp.utils.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class MailService:
    """이메일 작성 및 발송 서비스 — E-mail composition service."""

    async def send_reset_password(self, user: User, token: str) -> bool:
        """비밀번호 재설정 링크 발송.

        Send the password reset link. Failures are logged and reported as
        ``False`` so that the caller does not disclose whether the account exists.
        """
        link: str = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
        minutes: int = settings.RESET_TOKEN_EXPIRE_MINUTES
        html: str = (
            f"<p>Hello {escape(user.username)},</p>"
            f"<p>To reset your password, follow this link within {minutes} minutes:</p>"
            f'<p><a href="{escape(link)}">{escape(link)}</a></p>'
            "<p>If you did not request a new password, ignore this message.</p>"
        )
        text: str = f"To reset your password, open {link} within {minutes} minutes."
        try:
            await send_email(user.email, f"{settings.APP_NAME} - Reset password", html, text)
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.warning("Unable to send the reset e-mail to %s: %s", user.username, exc)
            return False
        logger.info("Reset password e-mail sent to %s", user.username)
        return True

    async def send_message(self, sender: User, recipient: User, subject: str, message: str) -> None:
        """사용자 간 메시지 발송 — Send a message from one user to another.

        Raises:
            UpstreamError: SMTP 발송 실패 (The mail server rejected the message)
        """
        html: str = (
            f"<p>{escape(message).replace(chr(10), '<br>')}</p>"
            f"<hr><p>{escape(sender.username)} &lt;{escape(sender.email)}&gt;</p>"
        )
        try:
            await send_email(recipient.email, subject, html, message, reply_to=sender.email)
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Unable to send a message from %s to %s: %s", sender.username, recipient.username, exc)
            raise UpstreamError("Unable to send the message") from exc
        logger.info("Message sent from %s to %s", sender.username, recipient.username)

    async def send_state_changed(self, calculation: Calculation, recipient: User, old_state: str, changed_by: str) -> bool:
        """상태 변경 알림 — Notify the creator that the calculation changed state."""
        subject: str = f"Calculation {calculation.id} - {calculation.state.code}"
        html: str = (
            f"<p>The calculation <b>{escape(calculation.description)}</b> "
            f"for {escape(calculation.customer)} moved from <b>{escape(old_state)}</b> "
            f"to <b>{escape(calculation.state.code)}</b> by {escape(changed_by)}.</p>"
        )
        try:
            await send_email(recipient.email, subject, html)
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.warning("Unable to notify %s of calculation %s: %s", recipient.username, calculation.id, exc)
            return False
        return True


# 싱글턴 인스턴스 — Singleton instance
mail_service: MailService = MailService()
