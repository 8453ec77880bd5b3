"""add_user_rights

Revision ID: 8e2f4b6a1d93
Revises: 5c1a7e9d2b40
Create Date: 2026-10-19 14:00:00.000000

사용자별 엔티티 권한 컬럼 추가 (역할 기본 권한 덮어쓰기).
Add the per-user entity rights overriding the role defaults.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e2f4b6a1d93'
down_revision: Union[str, None] = '5c1a7e9d2b40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 엔티티별 권한 마스크 목록 — One bitmask per entity (JSON list)
    op.add_column('users', sa.Column('rights', sa.JSON(), nullable=True))
    op.add_column('users', sa.Column('overwrite', sa.Boolean(), server_default=sa.text('false'), nullable=False))


def downgrade() -> None:
    op.drop_column('users', 'overwrite')
    op.drop_column('users', 'rights')
