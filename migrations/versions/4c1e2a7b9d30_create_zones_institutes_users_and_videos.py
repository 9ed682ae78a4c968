"""create zones, institutes, users and video_content

Revision ID: 4c1e2a7b9d30
Revises:
Create Date: 2026-10-17 09:12:44.518302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4c1e2a7b9d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'zones',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_zones_id'), 'zones', ['id'], unique=False)
    op.create_index(op.f('ix_zones_status'), 'zones', ['status'], unique=False)

    op.create_table(
        'institutes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('zone_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['zone_id'], ['zones.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code')
    )
    op.create_index(op.f('ix_institutes_id'), 'institutes', ['id'], unique=False)
    op.create_index(op.f('ix_institutes_name'), 'institutes', ['name'], unique=False)
    op.create_index(op.f('ix_institutes_zone_id'), 'institutes', ['zone_id'], unique=False)
    op.create_index(op.f('ix_institutes_status'), 'institutes', ['status'], unique=False)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('role', sa.String(length=30), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('institute_id', sa.Integer(), nullable=True),
        sa.Column('zone_id', sa.Integer(), nullable=True),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['institute_id'], ['institutes.id'], ),
        sa.ForeignKeyConstraint(['zone_id'], ['zones.id'], ),
        sa.ForeignKeyConstraint(['parent_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)
    op.create_index(op.f('ix_users_status'), 'users', ['status'], unique=False)
    op.create_index(op.f('ix_users_institute_id'), 'users', ['institute_id'], unique=False)
    op.create_index(op.f('ix_users_zone_id'), 'users', ['zone_id'], unique=False)
    op.create_index(op.f('ix_users_parent_id'), 'users', ['parent_id'], unique=False)

    op.create_table(
        'video_content',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('youtube_video_id', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('difficulty_level', sa.String(length=20), nullable=False),
        sa.Column('course_order', sa.Integer(), nullable=False),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('institute_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['institute_id'], ['institutes.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_video_content_id'), 'video_content', ['id'], unique=False)
    op.create_index(op.f('ix_video_content_youtube_video_id'), 'video_content', ['youtube_video_id'], unique=True)
    op.create_index(op.f('ix_video_content_category'), 'video_content', ['category'], unique=False)
    op.create_index(op.f('ix_video_content_status'), 'video_content', ['status'], unique=False)
    op.create_index(op.f('ix_video_content_institute_id'), 'video_content', ['institute_id'], unique=False)
    op.create_index('ix_video_content_course_order_created_at', 'video_content', ['course_order', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_video_content_course_order_created_at', table_name='video_content')
    op.drop_index(op.f('ix_video_content_institute_id'), table_name='video_content')
    op.drop_index(op.f('ix_video_content_status'), table_name='video_content')
    op.drop_index(op.f('ix_video_content_category'), table_name='video_content')
    op.drop_index(op.f('ix_video_content_youtube_video_id'), table_name='video_content')
    op.drop_index(op.f('ix_video_content_id'), table_name='video_content')
    op.drop_table('video_content')
    op.drop_index(op.f('ix_users_parent_id'), table_name='users')
    op.drop_index(op.f('ix_users_zone_id'), table_name='users')
    op.drop_index(op.f('ix_users_institute_id'), table_name='users')
    op.drop_index(op.f('ix_users_status'), table_name='users')
    op.drop_index(op.f('ix_users_role'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
    op.drop_index(op.f('ix_institutes_status'), table_name='institutes')
    op.drop_index(op.f('ix_institutes_zone_id'), table_name='institutes')
    op.drop_index(op.f('ix_institutes_name'), table_name='institutes')
    op.drop_index(op.f('ix_institutes_id'), table_name='institutes')
    op.drop_table('institutes')
    op.drop_index(op.f('ix_zones_status'), table_name='zones')
    op.drop_index(op.f('ix_zones_id'), table_name='zones')
    op.drop_table('zones')
