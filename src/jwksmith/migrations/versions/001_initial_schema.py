"""Initial JWKSmith schema — signing key records.

Revision ID: 001
Create Date: 2026-10-17
"""

import sqlalchemy as sa
from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "jwksmith_signing_keys",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("algorithm", sa.String(16), nullable=False),
        sa.Column("public_key", sa.Text(), nullable=False),
        sa.Column("private_key", sa.Text(), nullable=True),
        sa.Column("certificate", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("private_key_expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("key_expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_jwksmith_signing_keys_created_at", "jwksmith_signing_keys", ["created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_jwksmith_signing_keys_created_at", table_name="jwksmith_signing_keys")
    op.drop_table("jwksmith_signing_keys")
