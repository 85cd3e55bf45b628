"""initial studio recorder schema

Revision ID: 20261017_0001
Revises: None
Create Date: 2026-10-17 10:00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "module_recorders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("log_text", sa.Text(), nullable=True),
        sa.Column("last_run_ok", sa.Boolean(), nullable=False),
        sa.Column("auto_create", sa.Boolean(), nullable=False),
        sa.Column("all_view_update", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_module_recorders_name", "module_recorders", ["name"], unique=True)

    op.create_table(
        "studio_configurations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("build_cmd", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "meta_models",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=512), nullable=True),
        sa.Column("edited", sa.Boolean(), nullable=False),
        sa.Column("customised", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_meta_models_name", "meta_models", ["name"], unique=False)
    op.create_index("ix_meta_models_edited", "meta_models", ["edited"], unique=False)
    op.create_index("ix_meta_models_customised", "meta_models", ["customised"], unique=False)

    op.create_table(
        "meta_views",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("xml_id", sa.String(length=255), nullable=True),
        sa.Column("model", sa.String(length=512), nullable=True),
        sa.Column("module", sa.String(length=255), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("xml", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_meta_views_name", "meta_views", ["name"], unique=False)
    op.create_index("ix_meta_views_type", "meta_views", ["type"], unique=False)
    op.create_index("ix_meta_views_xml_id", "meta_views", ["xml_id"], unique=False)

    op.create_table(
        "meta_actions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("model", sa.String(length=512), nullable=True),
        sa.Column("module", sa.String(length=255), nullable=True),
        sa.Column("xml", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_meta_actions_name", "meta_actions", ["name"], unique=False)

    op.create_table(
        "view_builders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("model", sa.String(length=512), nullable=True),
        sa.Column("view_type", sa.String(length=32), nullable=True),
        sa.Column("edited", sa.Boolean(), nullable=False),
        sa.Column("recorded", sa.Boolean(), nullable=False),
        sa.Column("params", sa.JSON(), nullable=True),
        sa.Column("meta_view_generated_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["meta_view_generated_id"], ["meta_views.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_view_builders_name", "view_builders", ["name"], unique=False)
    op.create_index("ix_view_builders_edited", "view_builders", ["edited"], unique=False)
    op.create_index("ix_view_builders_recorded", "view_builders", ["recorded"], unique=False)

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("recorder_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("payload_hash", sa.String(length=128), nullable=False),
        sa.Column("payload_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["recorder_id"], ["module_recorders.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_recorder_id", "audit_log", ["recorder_id"], unique=False)
    op.create_index("ix_audit_log_action", "audit_log", ["action"], unique=False)
    op.create_index("ix_audit_log_payload_hash", "audit_log", ["payload_hash"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_log_payload_hash", table_name="audit_log")
    op.drop_index("ix_audit_log_action", table_name="audit_log")
    op.drop_index("ix_audit_log_recorder_id", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_view_builders_recorded", table_name="view_builders")
    op.drop_index("ix_view_builders_edited", table_name="view_builders")
    op.drop_index("ix_view_builders_name", table_name="view_builders")
    op.drop_table("view_builders")
    op.drop_index("ix_meta_actions_name", table_name="meta_actions")
    op.drop_table("meta_actions")
    op.drop_index("ix_meta_views_xml_id", table_name="meta_views")
    op.drop_index("ix_meta_views_type", table_name="meta_views")
    op.drop_index("ix_meta_views_name", table_name="meta_views")
    op.drop_table("meta_views")
    op.drop_index("ix_meta_models_customised", table_name="meta_models")
    op.drop_index("ix_meta_models_edited", table_name="meta_models")
    op.drop_index("ix_meta_models_name", table_name="meta_models")
    op.drop_table("meta_models")
    op.drop_table("studio_configurations")
    op.drop_index("ix_module_recorders_name", table_name="module_recorders")
    op.drop_table("module_recorders")
