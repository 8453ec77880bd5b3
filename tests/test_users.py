"""사용자 관리 API 테스트.

User management tests — Admin rights, super admin protection, duplicates,
password changes and messages.
"""

from httpx import AsyncClient

from calcapp.services.mail_service import mail_service
from tests.conftest import auth_header

USERS_URL = "/api/v1/users"


def _payload(username: str = "newbie", role: str = "ROLE_USER") -> dict:
    return {
        "username": username,
        "email": f"{username}@example.com",
        "password": "secret123",
        "role": role,
    }


class TestUserManagement:
    """사용자 CRUD 및 권한 테스트."""

    async def test_admin_creates_user(self, client: AsyncClient, admin_token: str):
        response = await client.post(USERS_URL, json=_payload(), headers=auth_header(admin_token))
        assert response.status_code == 201
        assert response.json()["role"] == "ROLE_USER"

    async def test_user_cannot_list_users(self, client: AsyncClient, user_token: str):
        response = await client.get(USERS_URL, headers=auth_header(user_token))
        assert response.status_code == 403

    async def test_admin_cannot_grant_super_admin(self, client: AsyncClient, admin_token: str):
        response = await client.post(
            USERS_URL, json=_payload(role="ROLE_SUPER_ADMIN"), headers=auth_header(admin_token)
        )
        assert response.status_code == 403

    async def test_super_admin_grants_super_admin(self, client: AsyncClient, super_admin_token: str):
        response = await client.post(
            USERS_URL, json=_payload(role="ROLE_SUPER_ADMIN"), headers=auth_header(super_admin_token)
        )
        assert response.status_code == 201

    async def test_unknown_role(self, client: AsyncClient, admin_token: str):
        response = await client.post(USERS_URL, json=_payload(role="ROLE_GOD"), headers=auth_header(admin_token))
        assert response.status_code == 400

    async def test_duplicate_username(self, client: AsyncClient, admin_token: str, normal_user):
        payload = _payload(username="user")
        payload["email"] = "other@example.com"
        response = await client.post(USERS_URL, json=payload, headers=auth_header(admin_token))
        assert response.status_code == 409

    async def test_admin_cannot_edit_super_admin(self, client: AsyncClient, admin_token: str, super_admin_user):
        response = await client.put(
            f"{USERS_URL}/{super_admin_user.id}", json={"enabled": False}, headers=auth_header(admin_token)
        )
        assert response.status_code == 403

    async def test_cannot_disable_self(self, client: AsyncClient, admin_token: str, admin_user):
        response = await client.put(
            f"{USERS_URL}/{admin_user.id}", json={"enabled": False}, headers=auth_header(admin_token)
        )
        assert response.status_code == 400

    async def test_cannot_delete_self(self, client: AsyncClient, admin_token: str, admin_user):
        response = await client.delete(f"{USERS_URL}/{admin_user.id}", headers=auth_header(admin_token))
        assert response.status_code == 400

    async def test_delete_user(self, client: AsyncClient, admin_token: str, normal_user):
        response = await client.delete(f"{USERS_URL}/{normal_user.id}", headers=auth_header(admin_token))
        assert response.status_code == 204
        response = await client.get(f"{USERS_URL}/{normal_user.id}", headers=auth_header(admin_token))
        assert response.status_code == 404

    async def test_export_users(self, client: AsyncClient, admin_token: str):
        response = await client.get(f"{USERS_URL}/export/xlsx", headers=auth_header(admin_token))
        assert response.status_code == 200
        assert response.content[:2] == b"PK"


class TestPasswordChange:
    """비밀번호 변경 테스트."""

    async def test_own_password_requires_current(self, client: AsyncClient, user_token: str, normal_user):
        response = await client.put(
            f"{USERS_URL}/{normal_user.id}/password",
            json={"current_password": "wrong", "password": "changed123"},
            headers=auth_header(user_token),
        )
        assert response.status_code == 400

        response = await client.put(
            f"{USERS_URL}/{normal_user.id}/password",
            json={"current_password": "user123!", "password": "changed123"},
            headers=auth_header(user_token),
        )
        assert response.status_code == 200

    async def test_user_cannot_change_other_password(
        self, client: AsyncClient, user_token: str, admin_user
    ):
        response = await client.put(
            f"{USERS_URL}/{admin_user.id}/password",
            json={"password": "changed123"},
            headers=auth_header(user_token),
        )
        assert response.status_code == 403

    async def test_admin_resets_user_password(self, client: AsyncClient, admin_token: str, normal_user):
        response = await client.put(
            f"{USERS_URL}/{normal_user.id}/password",
            json={"password": "changed123"},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200


class TestMessage:
    """사용자 메시지 테스트."""

    async def test_send_message(self, client: AsyncClient, user_token: str, admin_user, monkeypatch):
        sent: list[tuple[str, str]] = []

        async def _fake_send(sender, recipient, subject: str, message: str) -> None:
            sent.append((recipient.username, subject))

        monkeypatch.setattr(mail_service, "send_message", _fake_send)

        response = await client.post(
            f"{USERS_URL}/{admin_user.id}/message",
            json={"subject": "Hello", "message": "Please check my offer."},
            headers=auth_header(user_token),
        )
        assert response.status_code == 200
        assert sent == [("admin", "Hello")]

    async def test_cannot_message_self(self, client: AsyncClient, user_token: str, normal_user):
        response = await client.post(
            f"{USERS_URL}/{normal_user.id}/message",
            json={"subject": "Hello", "message": "Me"},
            headers=auth_header(user_token),
        )
        assert response.status_code == 400
