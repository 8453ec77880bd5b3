"""엔티티 권한 테스트.

Rights tests — Permission masks, role rights, per-user overrides, the
permission checks on the routers and the rights reports.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models import User
from calcapp.models.property import PROPERTY_USER_RIGHTS
from calcapp.models.rights import (
    DEFAULT_USER_RIGHTS,
    ENTITIES,
    ENTITY_CALCULATION,
    ENTITY_CUSTOMER,
    ENTITY_PRODUCT,
    ENTITY_USER,
    PERMISSION_ALL,
    EntityPermission,
    from_names,
    has_permission,
    rights_matrix,
    to_names,
)
from calcapp.models.user import ROLE_ADMIN, ROLE_USER
from calcapp.repositories.property_repository import property_repository
from calcapp.services.rights_service import rights_service
from tests.conftest import auth_header

USERS_URL = "/api/v1/users"
RIGHTS_URL = "/api/v1/admin/rights"


def _user_defaults() -> dict[str, list[str]]:
    return to_names(DEFAULT_USER_RIGHTS)


class TestRightsMasks:
    """권한 마스크 변환 테스트."""

    def test_default_user_rights(self):
        names = _user_defaults()
        assert names[ENTITY_CALCULATION] == ["list", "show", "add", "edit", "delete", "export"]
        assert names[ENTITY_PRODUCT] == ["list", "show", "export"]
        assert names[ENTITY_USER] == []

    def test_names_round_trip(self):
        rights = from_names({ENTITY_PRODUCT: ["show", "add"]})
        assert has_permission(rights, ENTITY_PRODUCT, EntityPermission.ADD)
        assert not has_permission(rights, ENTITY_PRODUCT, EntityPermission.DELETE)
        assert not has_permission(rights, ENTITY_CUSTOMER, EntityPermission.LIST)
        assert to_names(rights)[ENTITY_PRODUCT] == ["show", "add"]

    def test_unknown_names(self):
        with pytest.raises(ValueError):
            from_names({"spaceship": ["list"]})
        with pytest.raises(ValueError):
            from_names({ENTITY_PRODUCT: ["fly"]})

    def test_short_list_is_padded(self):
        assert not has_permission([PERMISSION_ALL], ENTITY_USER, EntityPermission.LIST)
        assert has_permission([PERMISSION_ALL], ENTITIES[0], EntityPermission.EXPORT)

    def test_matrix_hides_users_for_plain_users(self):
        user_rows = [entity for entity, _ in rights_matrix(DEFAULT_USER_RIGHTS, ROLE_USER)]
        admin_rows = [entity for entity, _ in rights_matrix(DEFAULT_USER_RIGHTS, ROLE_ADMIN)]
        assert ENTITY_USER not in user_rows
        assert ENTITY_USER in admin_rows
        assert len(admin_rows) == len(ENTITIES)


class TestGranted:
    """권한 확인 테스트."""

    async def test_super_admin_is_always_granted(self, db: AsyncSession, super_admin_user: User):
        super_admin_user.rights = [0] * len(ENTITIES)
        super_admin_user.overwrite = True
        assert await rights_service.is_granted(db, super_admin_user, ENTITY_USER, EntityPermission.DELETE)

    async def test_disabled_user_is_denied(self, db: AsyncSession, disabled_user: User):
        assert not await rights_service.is_granted(db, disabled_user, ENTITY_CALCULATION, EntityPermission.LIST)

    async def test_role_property_is_used(self, db: AsyncSession, normal_user: User):
        await property_repository.set_value(db, PROPERTY_USER_RIGHTS, "[16]")
        assert await rights_service.is_granted(db, normal_user, ENTITY_CALCULATION, EntityPermission.LIST)
        assert not await rights_service.is_granted(db, normal_user, ENTITY_CALCULATION, EntityPermission.ADD)

    async def test_invalid_property_falls_back_to_defaults(self, db: AsyncSession, normal_user: User):
        await property_repository.set_value(db, PROPERTY_USER_RIGHTS, "not json")
        assert await rights_service.get_user_rights(db, normal_user) == DEFAULT_USER_RIGHTS


class TestRoleRights:
    """역할 권한 API 테스트."""

    async def test_user_rights_default(self, client: AsyncClient, admin_token: str):
        response = await client.get(f"{RIGHTS_URL}/user", headers=auth_header(admin_token))
        assert response.status_code == 200
        body = response.json()
        assert body["role"] == ROLE_USER
        assert body["default"] is True
        assert body["rights"] == _user_defaults()

    async def test_restricting_users_denies_access(
        self,
        client: AsyncClient,
        admin_token: str,
        user_token: str,
    ):
        rights = _user_defaults()
        rights[ENTITY_CUSTOMER] = ["show"]
        response = await client.put(f"{RIGHTS_URL}/user", json={"rights": rights}, headers=auth_header(admin_token))
        assert response.status_code == 200
        assert response.json()["default"] is False

        response = await client.get("/api/v1/customers", headers=auth_header(user_token))
        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient permissions"

    async def test_saving_defaults_removes_the_property(
        self,
        client: AsyncClient,
        db: AsyncSession,
        admin_token: str,
    ):
        rights = _user_defaults()
        rights[ENTITY_PRODUCT] = []
        await client.put(f"{RIGHTS_URL}/user", json={"rights": rights}, headers=auth_header(admin_token))
        assert await property_repository.get_by_name(db, PROPERTY_USER_RIGHTS) is not None

        response = await client.put(
            f"{RIGHTS_URL}/user", json={"rights": _user_defaults()}, headers=auth_header(admin_token)
        )
        assert response.json()["default"] is True
        assert await property_repository.get_by_name(db, PROPERTY_USER_RIGHTS) is None

    async def test_unknown_entity(self, client: AsyncClient, admin_token: str):
        response = await client.put(
            f"{RIGHTS_URL}/user", json={"rights": {"spaceship": ["list"]}}, headers=auth_header(admin_token)
        )
        assert response.status_code == 400

    async def test_admin_rights_require_super_admin(
        self,
        client: AsyncClient,
        admin_token: str,
        super_admin_token: str,
    ):
        response = await client.get(f"{RIGHTS_URL}/admin", headers=auth_header(admin_token))
        assert response.status_code == 403

        response = await client.get(f"{RIGHTS_URL}/admin", headers=auth_header(super_admin_token))
        assert response.status_code == 200
        assert response.json()["rights"][ENTITY_USER] == ["list", "show", "add", "edit", "delete", "export"]

    async def test_restricted_admin(
        self,
        client: AsyncClient,
        admin_token: str,
        super_admin_token: str,
    ):
        rights = to_names([PERMISSION_ALL] * len(ENTITIES))
        rights[ENTITY_USER] = ["list"]
        response = await client.put(
            f"{RIGHTS_URL}/admin", json={"rights": rights}, headers=auth_header(super_admin_token)
        )
        assert response.status_code == 200

        assert (await client.get(USERS_URL, headers=auth_header(admin_token))).status_code == 200
        response = await client.post(
            USERS_URL,
            json={"username": "newbie", "email": "newbie@example.com", "password": "secret123", "role": ROLE_USER},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 403

    async def test_user_cannot_read_role_rights(self, client: AsyncClient, user_token: str):
        response = await client.get(f"{RIGHTS_URL}/user", headers=auth_header(user_token))
        assert response.status_code == 403


class TestUserRights:
    """사용자별 권한 API 테스트."""

    async def test_override_grants_access(
        self,
        client: AsyncClient,
        admin_token: str,
        user_token: str,
        normal_user: User,
    ):
        assert (await client.get(USERS_URL, headers=auth_header(user_token))).status_code == 403

        rights = _user_defaults()
        rights[ENTITY_USER] = ["list"]
        response = await client.put(
            f"{USERS_URL}/{normal_user.id}/rights", json={"rights": rights}, headers=auth_header(admin_token)
        )
        assert response.status_code == 200
        body = response.json()
        assert body["overwrite"] is True
        assert body["rights"][ENTITY_USER] == ["list"]

        assert (await client.get(USERS_URL, headers=auth_header(user_token))).status_code == 200

    async def test_role_rights_clear_the_override(self, client: AsyncClient, admin_token: str, normal_user: User):
        rights = _user_defaults()
        rights[ENTITY_PRODUCT] = []
        url = f"{USERS_URL}/{normal_user.id}/rights"
        await client.put(url, json={"rights": rights}, headers=auth_header(admin_token))

        response = await client.put(url, json={"rights": _user_defaults()}, headers=auth_header(admin_token))
        assert response.json()["overwrite"] is False
        assert normal_user.rights is None

    async def test_reset(self, client: AsyncClient, admin_token: str, normal_user: User):
        url = f"{USERS_URL}/{normal_user.id}/rights"
        await client.put(url, json={"rights": {ENTITY_CALCULATION: ["list"]}}, headers=auth_header(admin_token))

        response = await client.delete(url, headers=auth_header(admin_token))
        assert response.status_code == 200
        assert response.json()["overwrite"] is False
        assert response.json()["rights"] == _user_defaults()

    async def test_cannot_edit_own_rights(self, client: AsyncClient, admin_token: str, admin_user: User):
        response = await client.put(
            f"{USERS_URL}/{admin_user.id}/rights",
            json={"rights": {ENTITY_USER: ["list"]}},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 403

    async def test_admin_cannot_edit_super_admin(
        self,
        client: AsyncClient,
        admin_token: str,
        super_admin_user: User,
    ):
        response = await client.put(
            f"{USERS_URL}/{super_admin_user.id}/rights",
            json={"rights": {}},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 403

    async def test_user_listing_shows_the_override(
        self,
        client: AsyncClient,
        admin_token: str,
        normal_user: User,
    ):
        await client.put(
            f"{USERS_URL}/{normal_user.id}/rights",
            json={"rights": {ENTITY_CALCULATION: ["list"]}},
            headers=auth_header(admin_token),
        )
        response = await client.get(f"{USERS_URL}/{normal_user.id}", headers=auth_header(admin_token))
        assert response.json()["overwrite"] is True


class TestRightsReports:
    """권한 보고서 테스트."""

    async def test_exports(self, client: AsyncClient, admin_token: str, normal_user: User):
        response = await client.get(f"{USERS_URL}/rights/xlsx", headers=auth_header(admin_token))
        assert response.status_code == 200
        assert response.content[:2] == b"PK"

        response = await client.get(f"{USERS_URL}/rights/pdf", headers=auth_header(admin_token))
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content[:4] == b"%PDF"

    async def test_exports_require_admin(self, client: AsyncClient, user_token: str):
        response = await client.get(f"{USERS_URL}/rights/pdf", headers=auth_header(user_token))
        assert response.status_code == 403
