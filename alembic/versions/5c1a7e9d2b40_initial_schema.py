"""initial_schema

Revision ID: 5c1a7e9d2b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

계산서 관리 스키마 생성: 사용자, 카탈로그, 마진, 작업, 고객, 계산서 트리, 파라미터.
Create the calculation management schema: users, catalog, margins, tasks,
customers, the calculation tree and application parameters.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '5c1a7e9d2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _range_columns() -> list[sa.Column]:
    # 범위 컬럼 — minimum (inclusive) / maximum (exclusive)
    return [
        sa.Column('minimum', sa.Float(), nullable=False, server_default='0'),
        sa.Column('maximum', sa.Float(), nullable=False, server_default='0'),
    ]


def upgrade() -> None:
    # users — 사용자와 역할 (ROLE_SUPER_ADMIN / ROLE_ADMIN / ROLE_USER)
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(180), nullable=False, unique=True),
        sa.Column('email', sa.String(180), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(30), nullable=False, server_default='ROLE_USER'),
        sa.Column('enabled', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('verified', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'refresh_tokens',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(512), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_refresh_tokens_user', 'refresh_tokens', ['user_id'])

    # groups / group_margins — 그룹과 금액별 마진
    op.create_table(
        'groups',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(30), nullable=False, unique=True),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'group_margins',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('group_id', UUID(as_uuid=True), sa.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False),
        *_range_columns(),
        sa.Column('margin', sa.Float(), nullable=False, server_default='0'),
    )
    op.create_index('ix_group_margins_group', 'group_margins', ['group_id'])

    # categories / products — 카테고리와 제품 (RESTRICT: 사용 중이면 삭제 불가)
    op.create_table(
        'categories',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(30), nullable=False, unique=True),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('group_id', UUID(as_uuid=True), sa.ForeignKey('groups.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'products',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('description', sa.String(255), nullable=False, unique=True),
        sa.Column('unit', sa.String(15), nullable=True),
        sa.Column('price', sa.Float(), nullable=False, server_default='0'),
        sa.Column('supplier', sa.String(255), nullable=True),
        sa.Column('category_id', UUID(as_uuid=True), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_products_category', 'products', ['category_id'])

    op.create_table(
        'global_margins',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        *_range_columns(),
        sa.Column('margin', sa.Float(), nullable=False, server_default='0'),
    )

    # tasks — 작업, 작업 항목, 수량별 항목 가격
    op.create_table(
        'tasks',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('unit', sa.String(15), nullable=True),
        sa.Column('supplier', sa.String(255), nullable=True),
        sa.Column('category_id', UUID(as_uuid=True), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'task_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('task_id', UUID(as_uuid=True), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('position', sa.Integer(), server_default='0'),
        sa.UniqueConstraint('task_id', 'name', name='uq_task_item_name'),
    )
    op.create_table(
        'task_item_margins',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('task_item_id', UUID(as_uuid=True), sa.ForeignKey('task_items.id', ondelete='CASCADE'), nullable=False),
        *_range_columns(),
        sa.Column('value', sa.Float(), nullable=False, server_default='0'),
    )

    # digi_prints — 디지털 프린트 형식과 수량별 가격/블랭킷
    op.create_table(
        'digi_prints',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('format', sa.String(30), nullable=False, unique=True),
        sa.Column('width', sa.Integer(), server_default='0'),
        sa.Column('height', sa.Integer(), server_default='0'),
    )
    op.create_table(
        'digi_print_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('digi_print_id', UUID(as_uuid=True), sa.ForeignKey('digi_prints.id', ondelete='CASCADE'), nullable=False),
        *_range_columns(),
        sa.Column('type', sa.String(20), nullable=False, server_default='price'),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
    )

    op.create_table(
        'customers',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(50), nullable=True),
        sa.Column('first_name', sa.String(50), nullable=True),
        sa.Column('last_name', sa.String(50), nullable=True),
        sa.Column('company', sa.String(255), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('zip_code', sa.String(10), nullable=True),
        sa.Column('city', sa.String(255), nullable=True),
        sa.Column('country', sa.String(2), nullable=True, server_default='CH'),
        sa.Column('email', sa.String(100), nullable=True),
        sa.Column('web_site', sa.String(100), nullable=True),
        sa.Column('birthday', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # calculation_states / calculations — 계산서 상태와 계산서
    op.create_table(
        'calculation_states',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(30), nullable=False, unique=True),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('editable', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('color', sa.String(10), server_default='#000000', nullable=False),
    )
    op.create_table(
        'calculations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('customer', sa.String(255), nullable=False),
        sa.Column('description', sa.String(255), nullable=False),
        sa.Column('state_id', UUID(as_uuid=True), sa.ForeignKey('calculation_states.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('user_margin', sa.Float(), nullable=False, server_default='0'),
        sa.Column('global_margin', sa.Float(), nullable=False, server_default='0'),
        sa.Column('items_total', sa.Float(), nullable=False, server_default='0'),
        sa.Column('overall_total', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.String(180), nullable=True),
        sa.Column('updated_by', sa.String(180), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_calculations_state_date', 'calculations', ['state_id', 'date'])

    # 계산서 트리 — groups > categories > items (CASCADE)
    op.create_table(
        'calculation_groups',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('calculation_id', UUID(as_uuid=True), sa.ForeignKey('calculations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('group_id', UUID(as_uuid=True), sa.ForeignKey('groups.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('code', sa.String(30), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('margin', sa.Float(), nullable=False, server_default='0'),
        sa.Column('position', sa.Integer(), server_default='0'),
    )
    op.create_index('ix_calculation_groups_calculation', 'calculation_groups', ['calculation_id'])
    op.create_table(
        'calculation_categories',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('group_id', UUID(as_uuid=True), sa.ForeignKey('calculation_groups.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', UUID(as_uuid=True), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('code', sa.String(30), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('position', sa.Integer(), server_default='0'),
    )
    op.create_index('ix_calculation_categories_group', 'calculation_categories', ['group_id'])
    op.create_table(
        'calculation_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('category_id', UUID(as_uuid=True), sa.ForeignKey('calculation_categories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('description', sa.String(255), nullable=False),
        sa.Column('unit', sa.String(15), nullable=True),
        sa.Column('price', sa.Float(), nullable=False, server_default='0'),
        sa.Column('quantity', sa.Float(), nullable=False, server_default='0'),
        sa.Column('position', sa.Integer(), server_default='0'),
    )
    op.create_index('ix_calculation_items_category', 'calculation_items', ['category_id'])

    # properties — 애플리케이션 파라미터 (name/value)
    op.create_table(
        'properties',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('value', sa.String(255), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('properties')
    op.drop_index('ix_calculation_items_category', table_name='calculation_items')
    op.drop_table('calculation_items')
    op.drop_index('ix_calculation_categories_group', table_name='calculation_categories')
    op.drop_table('calculation_categories')
    op.drop_index('ix_calculation_groups_calculation', table_name='calculation_groups')
    op.drop_table('calculation_groups')
    op.drop_index('ix_calculations_state_date', table_name='calculations')
    op.drop_table('calculations')
    op.drop_table('calculation_states')
    op.drop_table('customers')
    op.drop_table('digi_print_items')
    op.drop_table('digi_prints')
    op.drop_table('task_item_margins')
    op.drop_table('task_items')
    op.drop_table('tasks')
    op.drop_table('global_margins')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_index('ix_group_margins_group', table_name='group_margins')
    op.drop_table('group_margins')
    op.drop_table('groups')
    op.drop_index('ix_refresh_tokens_user', table_name='refresh_tokens')
    op.drop_table('refresh_tokens')
    op.drop_table('users')
