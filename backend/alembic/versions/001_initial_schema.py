"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00

"""
from alembic import op
from campjournal.core.config import settings
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = settings.db_schema


def _fk(target: str) -> str:
    return f"{SCHEMA}.{target}" if SCHEMA else target


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade() -> None:
    if SCHEMA and op.get_bind().dialect.name == "postgresql":
        op.execute(f'CREATE SCHEMA IF NOT EXISTS "{SCHEMA}"')
        op.execute('CREATE EXTENSION IF NOT EXISTS pg_trgm')

    op.create_table(
        'users',
        sa.Column('user_id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        *_timestamps(),
        sa.Column('deleted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        schema=SCHEMA
    )

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), sa.ForeignKey(_fk('users.user_id'), ondelete='CASCADE'), primary_key=True),
        sa.Column('username', sa.String(50), nullable=False, unique=True, index=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        *_timestamps(),
        schema=SCHEMA
    )

    op.create_table(
        'campgrounds',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('google_place_id', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(255), nullable=True),
        sa.Column('state', sa.String(255), nullable=True),
        sa.Column('country', sa.String(255), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('phone', sa.String(100), nullable=True),
        sa.Column('website', sa.Text(), nullable=True),
        sa.Column('google_rating', sa.Float(), nullable=True),
        sa.Column('google_maps_url', sa.Text(), nullable=True),
        *_timestamps(),
        schema=SCHEMA
    )

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey(_fk('users.user_id'), ondelete='CASCADE'), nullable=False),
        sa.Column('campground_id', sa.Uuid(), sa.ForeignKey(_fk('campgrounds.id'), ondelete='CASCADE'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('video_url', sa.Text(), nullable=True),
        sa.Column('is_favorite', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(20), nullable=False, server_default='published'),
        sa.Column('shared_from_user_id', sa.Uuid(), sa.ForeignKey(_fk('users.user_id'), ondelete='SET NULL'), nullable=True),
        sa.Column('shared_with_user_id', sa.Uuid(), sa.ForeignKey(_fk('users.user_id'), ondelete='SET NULL'), nullable=True),
        sa.Column('original_entry_id', sa.Uuid(), sa.ForeignKey(_fk('journal_entries.id'), ondelete='SET NULL'), nullable=True),
        sa.Column('shared_accepted', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('published', 'draft')", name='valid_entry_status'),
        sa.CheckConstraint("end_date >= start_date", name='valid_date_range'),
        schema=SCHEMA
    )
    op.create_index('idx_journal_entries_user_start', 'journal_entries', ['user_id', 'start_date'], schema=SCHEMA)
    op.create_index('idx_journal_entries_campground', 'journal_entries', ['campground_id'], schema=SCHEMA)

    op.create_table(
        'photos',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey(_fk('users.user_id'), ondelete='CASCADE'), nullable=False),
        sa.Column('campground_id', sa.Uuid(), sa.ForeignKey(_fk('campgrounds.id'), ondelete='CASCADE'), nullable=False),
        sa.Column('journal_entry_id', sa.Uuid(), sa.ForeignKey(_fk('journal_entries.id'), ondelete='CASCADE'), nullable=True),
        sa.Column('storage_path', sa.Text(), nullable=False),
        sa.Column('public_url', sa.Text(), nullable=False),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        schema=SCHEMA
    )
    op.create_index('idx_photos_journal_entry', 'photos', ['journal_entry_id'], schema=SCHEMA)
    op.create_index('idx_photos_storage_path', 'photos', ['storage_path'], schema=SCHEMA)
    op.create_index('idx_photos_user', 'photos', ['user_id'], schema=SCHEMA)

    op.create_table(
        'follows',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('follower_id', sa.Uuid(), sa.ForeignKey(_fk('users.user_id'), ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('following_id', sa.Uuid(), sa.ForeignKey(_fk('users.user_id'), ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('follower_id', 'following_id', name='uq_follows_pair'),
        sa.CheckConstraint('follower_id <> following_id', name='no_self_follow'),
        schema=SCHEMA
    )

    # Trigram indexes for user search
    if op.get_bind().dialect.name == "postgresql":
        prefix = f'"{SCHEMA}".' if SCHEMA else ''
        op.execute(f'CREATE INDEX IF NOT EXISTS idx_profiles_username_trgm ON {prefix}profiles USING gin (username gin_trgm_ops)')
        op.execute(f'CREATE INDEX IF NOT EXISTS idx_profiles_full_name_trgm ON {prefix}profiles USING gin (full_name gin_trgm_ops)')


def downgrade() -> None:
    op.drop_table('follows', schema=SCHEMA)
    op.drop_table('photos', schema=SCHEMA)
    op.drop_table('journal_entries', schema=SCHEMA)
    op.drop_table('campgrounds', schema=SCHEMA)
    op.drop_table('profiles', schema=SCHEMA)
    op.drop_table('users', schema=SCHEMA)
