"""엔티티 권한 정의 — Per-entity access rights.

Rights are a list of bitmasks, one per entity in ``ENTITIES`` order, stored
as JSON in ``users.rights`` (per-user override) or in the ``admin_rights``
and ``user_rights`` properties (role defaults).

    rights[ENTITIES.index("product")] & EntityPermission.ADD

A super admin is always granted; a disabled user never is.
"""

from enum import IntFlag

from calcapp.models.user import ROLE_ADMIN, ROLE_SUPER_ADMIN


class EntityPermission(IntFlag):
    """권한 플래그 — Permission bits."""

    ADD = 1
    DELETE = 2
    EDIT = 4
    EXPORT = 8
    LIST = 16
    SHOW = 32


# 표시 순서 — Display order of the permissions
PERMISSIONS_SORTED: tuple[EntityPermission, ...] = (
    EntityPermission.LIST,
    EntityPermission.SHOW,
    EntityPermission.ADD,
    EntityPermission.EDIT,
    EntityPermission.DELETE,
    EntityPermission.EXPORT,
)
PERMISSION_ALL: int = sum(PERMISSIONS_SORTED)
PERMISSION_READ: int = EntityPermission.LIST | EntityPermission.SHOW | EntityPermission.EXPORT

# 엔티티 이름 — Entity names (the index is the offset in a rights list)
ENTITY_CALCULATION: str = "calculation"
ENTITY_CALCULATION_STATE: str = "calculation_state"
ENTITY_CATEGORY: str = "category"
ENTITY_CUSTOMER: str = "customer"
ENTITY_GLOBAL_MARGIN: str = "global_margin"
ENTITY_GROUP: str = "group"
ENTITY_PRODUCT: str = "product"
ENTITY_TASK: str = "task"
ENTITY_USER: str = "user"

ENTITIES: tuple[str, ...] = (
    ENTITY_CALCULATION,
    ENTITY_CALCULATION_STATE,
    ENTITY_CATEGORY,
    ENTITY_CUSTOMER,
    ENTITY_GLOBAL_MARGIN,
    ENTITY_GROUP,
    ENTITY_PRODUCT,
    ENTITY_TASK,
    ENTITY_USER,
)

# 역할 기본 권한 — Built-in role defaults
DEFAULT_ADMIN_RIGHTS: list[int] = [PERMISSION_ALL] * len(ENTITIES)
DEFAULT_USER_RIGHTS: list[int] = [
    PERMISSION_ALL if entity in (ENTITY_CALCULATION, ENTITY_CUSTOMER)
    else 0 if entity == ENTITY_USER
    else PERMISSION_READ
    for entity in ENTITIES
]


def default_rights(role: str) -> list[int]:
    """역할의 기본 권한 — Built-in rights of a role (a copy)."""
    if role in (ROLE_SUPER_ADMIN, ROLE_ADMIN):
        return list(DEFAULT_ADMIN_RIGHTS)
    return list(DEFAULT_USER_RIGHTS)


def normalize_rights(rights: list[int] | None) -> list[int]:
    """길이 보정 — Pad or cut a stored list to one mask per entity."""
    values: list[int] = [int(value) & PERMISSION_ALL for value in (rights or [])][: len(ENTITIES)]
    return values + [0] * (len(ENTITIES) - len(values))


def has_permission(rights: list[int], entity: str, permission: EntityPermission) -> bool:
    if entity not in ENTITIES:
        return False
    return (normalize_rights(rights)[ENTITIES.index(entity)] & permission) == permission


def to_names(rights: list[int]) -> dict[str, list[str]]:
    """마스크 → 이름 — ``{"product": ["list", "show"], ...}``."""
    values: list[int] = normalize_rights(rights)
    return {
        entity: [p.name.lower() for p in PERMISSIONS_SORTED if values[index] & p]
        for index, entity in enumerate(ENTITIES)
    }


def from_names(names: dict[str, list[str]]) -> list[int]:
    """이름 → 마스크 — Inverse of ``to_names``; missing entities get no right.

    Raises:
        ValueError: 알 수 없는 엔티티 또는 권한 (Unknown entity or permission name)
    """
    rights: list[int] = [0] * len(ENTITIES)
    for entity, permissions in names.items():
        if entity not in ENTITIES:
            raise ValueError(f"Unknown entity '{entity}'")
        mask: int = 0
        for name in permissions:
            try:
                mask |= EntityPermission[name.upper()]
            except KeyError:
                raise ValueError(f"Unknown permission '{name}'") from None
        rights[ENTITIES.index(entity)] = mask
    return rights


def rights_matrix(rights: list[int], role: str) -> list[tuple[str, list[bool]]]:
    """보고서 행 — One row per entity with the ``PERMISSIONS_SORTED`` flags.

    The user entity is left out for the plain user role.
    """
    values: list[int] = normalize_rights(rights)
    return [
        (entity, [bool(values[index] & p) for p in PERMISSIONS_SORTED])
        for index, entity in enumerate(ENTITIES)
        if role in (ROLE_SUPER_ADMIN, ROLE_ADMIN) or entity != ENTITY_USER
    ]
