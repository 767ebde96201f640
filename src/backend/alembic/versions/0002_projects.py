"""Revision 0002: projects table

Creates the projects table. Each project owns a unique subdomain and at most
one custom domain; the custom domain is unique across all projects, and
domain_status is present exactly when a custom domain is.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18
"""

import sqlalchemy as sa

from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "projects",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("project_name", sa.Text(), nullable=False),
        sa.Column("emoji", sa.Text(), server_default=sa.text("'🚀'"), nullable=False),
        sa.Column("subdomain", sa.Text(), nullable=False),
        sa.Column("custom_domain", sa.Text(), nullable=True),
        sa.Column(
            "domain_status",
            sa.Text(),
            sa.CheckConstraint(
                "domain_status IN ('pending', 'added', 'verified', 'failed')",
                name="ck_projects_domain_status",
            ),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
        sa.UniqueConstraint("subdomain", name="uq_projects_subdomain"),
        sa.UniqueConstraint("custom_domain", name="uq_projects_custom_domain"),
        sa.CheckConstraint(
            "(custom_domain IS NULL) = (domain_status IS NULL)",
            name="ck_projects_domain_status_presence",
        ),
    )
    op.create_index("ix_projects_domain_status", "projects", ["domain_status"])


def downgrade():
    op.drop_index("ix_projects_domain_status", table_name="projects")
    op.drop_table("projects")
