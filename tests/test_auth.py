"""인증 API 테스트.

Authentication tests — Login by username or e-mail, token refresh,
logout, the current user and the password reset flow.
"""

from httpx import AsyncClient

from calcapp.services.mail_service import mail_service
from tests.conftest import auth_header

AUTH_URL = "/api/v1/auth"


class TestLogin:
    """로그인 테스트."""

    async def test_login_by_username(self, client: AsyncClient, admin_user):
        response = await client.post(f"{AUTH_URL}/login", json={"username": "admin", "password": "admin123!"})
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]

    async def test_login_by_email(self, client: AsyncClient, admin_user):
        response = await client.post(
            f"{AUTH_URL}/login", json={"username": "Admin@Example.com", "password": "admin123!"}
        )
        assert response.status_code == 200

    async def test_wrong_password(self, client: AsyncClient, admin_user):
        response = await client.post(f"{AUTH_URL}/login", json={"username": "admin", "password": "wrong"})
        assert response.status_code == 401

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.post(f"{AUTH_URL}/login", json={"username": "nobody", "password": "x"})
        assert response.status_code == 401

    async def test_disabled_user(self, client: AsyncClient, disabled_user):
        response = await client.post(
            f"{AUTH_URL}/login", json={"username": "disabled", "password": "disabled123!"}
        )
        assert response.status_code == 401


class TestTokens:
    """토큰 갱신/로그아웃 테스트."""

    async def _login(self, client: AsyncClient) -> dict:
        response = await client.post(f"{AUTH_URL}/login", json={"username": "admin", "password": "admin123!"})
        return response.json()

    async def test_refresh(self, client: AsyncClient, admin_user):
        tokens = await self._login(client)
        response = await client.post(f"{AUTH_URL}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 200
        assert response.json()["access_token"]

    async def test_refresh_with_access_token_fails(self, client: AsyncClient, admin_user):
        tokens = await self._login(client)
        response = await client.post(f"{AUTH_URL}/refresh", json={"refresh_token": tokens["access_token"]})
        assert response.status_code == 401

    async def test_logout_revokes_refresh_token(self, client: AsyncClient, admin_user):
        tokens = await self._login(client)
        response = await client.post(f"{AUTH_URL}/logout", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 204

        response = await client.post(f"{AUTH_URL}/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 401


class TestMe:
    """현재 사용자 테스트."""

    async def test_me(self, client: AsyncClient, admin_token: str):
        response = await client.get(f"{AUTH_URL}/me", headers=auth_header(admin_token))
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "admin"
        assert data["role"] == "ROLE_ADMIN"
        assert data["level"] == 2

    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get(f"{AUTH_URL}/me")
        assert response.status_code in (401, 403)

    async def test_me_with_invalid_token(self, client: AsyncClient):
        response = await client.get(f"{AUTH_URL}/me", headers=auth_header("not-a-token"))
        assert response.status_code == 401

    async def test_disabled_user_token_rejected(self, client: AsyncClient, disabled_user):
        from tests.conftest import make_token

        response = await client.get(f"{AUTH_URL}/me", headers=auth_header(make_token(disabled_user)))
        assert response.status_code == 401


class TestPasswordReset:
    """비밀번호 재설정 테스트."""

    async def test_reset_flow(self, client: AsyncClient, normal_user, monkeypatch):
        sent: list[str] = []

        async def _fake_send(user, token: str) -> bool:
            sent.append(token)
            return True

        monkeypatch.setattr(mail_service, "send_reset_password", _fake_send)

        response = await client.post(f"{AUTH_URL}/forgot-password", json={"username": "user"})
        assert response.status_code == 200
        assert len(sent) == 1

        response = await client.post(
            f"{AUTH_URL}/reset-password", json={"token": sent[0], "password": "brand-new-password"}
        )
        assert response.status_code == 200

        response = await client.post(
            f"{AUTH_URL}/login", json={"username": "user", "password": "brand-new-password"}
        )
        assert response.status_code == 200

        # 토큰은 한 번만 사용 가능 — The token is bound to the previous password
        response = await client.post(
            f"{AUTH_URL}/reset-password", json={"token": sent[0], "password": "another-password"}
        )
        assert response.status_code == 400

    async def test_unknown_account_answers_the_same(self, client: AsyncClient, monkeypatch):
        sent: list[str] = []

        async def _fake_send(user, token: str) -> bool:
            sent.append(token)
            return True

        monkeypatch.setattr(mail_service, "send_reset_password", _fake_send)

        response = await client.post(f"{AUTH_URL}/forgot-password", json={"username": "nobody"})
        assert response.status_code == 200
        assert sent == []

    async def test_invalid_reset_token(self, client: AsyncClient):
        response = await client.post(
            f"{AUTH_URL}/reset-password", json={"token": "garbage", "password": "whatever1"}
        )
        assert response.status_code == 400
