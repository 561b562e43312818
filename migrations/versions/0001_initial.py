"""initial schema: clusters, namespaces, apps, deployments, templates, publish status/history

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

publish_type = sa.Enum("DEPLOYMENT", name="publishtype")
release_status = sa.Enum("SUCCESS", "FAILURE", name="releasestatus")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "clusters",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("meta_data", sa.Text()),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_clusters_name", "clusters", ["name"], unique=True)

    op.create_table(
        "namespaces",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("meta_data", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_namespaces_name", "namespaces", ["name"], unique=True)

    op.create_table(
        "apps",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("namespace_id", sa.Integer(), sa.ForeignKey("namespaces.id"), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "deployments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("app_id", sa.Integer(), sa.ForeignKey("apps.id"), nullable=False),
        sa.Column("template_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("meta_data", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_deployments_name", "deployments", ["name"], unique=True)

    op.create_table(
        "deployment_templates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deployment_id", sa.Integer(), sa.ForeignKey("deployments.id"), nullable=False),
        sa.Column("template", sa.Text(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("user", sa.String(128)),
        *_timestamps(),
    )
    op.create_index("ix_deployment_templates_deployment_id", "deployment_templates", ["deployment_id"])

    op.create_table(
        "publish_status",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", publish_type, nullable=False),
        sa.Column("resource_id", sa.Integer(), nullable=False),
        sa.Column("template_id", sa.Integer(), nullable=False),
        sa.Column("cluster", sa.String(128), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("type", "resource_id", "cluster", name="uq_publish_status_resource_cluster"),
    )
    op.create_index("ix_publish_status_resource_id", "publish_status", ["resource_id"])

    op.create_table(
        "publish_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", publish_type, nullable=False),
        sa.Column("resource_id", sa.Integer(), nullable=False),
        sa.Column("resource_name", sa.String(128), nullable=False),
        sa.Column("template_id", sa.Integer(), nullable=False),
        sa.Column("cluster", sa.String(128), nullable=False),
        sa.Column("user", sa.String(128)),
        sa.Column("message", sa.Text()),
        sa.Column("status", release_status),
        *_timestamps(),
    )
    op.create_index("ix_publish_history_resource_id", "publish_history", ["resource_id"])


def downgrade() -> None:
    op.drop_table("publish_history")
    op.drop_table("publish_status")
    op.drop_table("deployment_templates")
    op.drop_table("deployments")
    op.drop_table("apps")
    op.drop_table("namespaces")
    op.drop_table("clusters")
    release_status.drop(op.get_bind(), checkfirst=True)
    publish_type.drop(op.get_bind(), checkfirst=True)
