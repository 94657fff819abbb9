"""Initial catalog schema.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "category",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("parent_id", sa.String(64), nullable=True),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["category.id"], name="fk_category_parent_id_category"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_category"),
        sa.UniqueConstraint("external_id", name="uq_category_external_id"),
    )
    op.create_index("ix_category_name_parent", "category", ["name", "parent_id"])

    op.create_table(
        "developer",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_developer"),
    )

    op.create_table(
        "app",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("version", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.String(64), nullable=False),
        sa.Column("subcategory_id", sa.String(64), nullable=True),
        sa.Column("developer_id", sa.String(64), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("screenshots", sa.JSON(), nullable=False),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("price", sa.String(), nullable=True),
        sa.Column("vendor", sa.String(), nullable=True),
        sa.Column("license", sa.String(), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("download_url", sa.String(), nullable=True),
        sa.Column("download_count", sa.Integer(), nullable=False),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("release_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_scan_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False),
        sa.Column("is_beta", sa.Boolean(), nullable=False),
        sa.Column("is_supported", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["category_id"], ["category.id"], name="fk_app_category_id_category"
        ),
        sa.ForeignKeyConstraint(
            ["developer_id"], ["developer.id"], name="fk_app_developer_id_developer"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_app"),
    )
    op.create_index("ix_app_category_id", "app", ["category_id"])
    op.create_index("ix_app_developer_id", "app", ["developer_id"])

    op.create_table(
        "app_bundle_id",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("app_id", sa.Uuid(), nullable=False),
        sa.Column("value", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["app_id"], ["app.id"], name="fk_app_bundle_id_app_id_app", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_app_bundle_id"),
        sa.UniqueConstraint("value", name="uq_app_bundle_id_value"),
    )
    op.create_index("ix_app_bundle_id_app_id", "app_bundle_id", ["app_id"])

    op.create_table(
        "sync_run",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("running", "completed", "failed", name="syncstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "trigger",
            sa.Enum("manual", "scheduled", name="synctrigger", native_enum=False),
            nullable=False,
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("added", sa.Integer(), nullable=False),
        sa.Column("updated", sa.Integer(), nullable=False),
        sa.Column("unchanged", sa.Integer(), nullable=False),
        sa.Column("removed", sa.Integer(), nullable=False),
        sa.Column("errors", sa.Integer(), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_sync_run"),
    )
    op.create_index("ix_sync_run_started_at", "sync_run", ["started_at"])
    op.create_index(
        "uq_sync_run_single_running",
        "sync_run",
        ["status"],
        unique=True,
        sqlite_where=sa.text("status = 'running'"),
        postgresql_where=sa.text("status = 'running'"),
    )


def downgrade() -> None:
    op.drop_index("uq_sync_run_single_running", table_name="sync_run")
    op.drop_index("ix_sync_run_started_at", table_name="sync_run")
    op.drop_table("sync_run")
    op.drop_index("ix_app_bundle_id_app_id", table_name="app_bundle_id")
    op.drop_table("app_bundle_id")
    op.drop_index("ix_app_developer_id", table_name="app")
    op.drop_index("ix_app_category_id", table_name="app")
    op.drop_table("app")
    op.drop_table("developer")
    op.drop_index("ix_category_name_parent", table_name="category")
    op.drop_table("category")
