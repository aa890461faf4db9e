"""Documents table - one row per workspace entity of any kind.

Revision ID: 001_documents
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_documents"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("kind", sa.String(100), nullable=False),
        sa.Column("space", sa.String(64), nullable=True),
        sa.Column("attached_to", sa.String(64), nullable=True),
        sa.Column("attached_to_kind", sa.String(100), nullable=True),
        sa.Column("collection", sa.String(100), nullable=True),
        sa.Column("attributes", sa.JSON, nullable=False),
        sa.Column("created_on", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("modified_on", sa.BigInteger, nullable=False, server_default="0"),
    )
    op.create_index("ix_documents_kind_space", "documents", ["kind", "space"])


def downgrade() -> None:
    op.drop_index("ix_documents_kind_space", table_name="documents")
    op.drop_table("documents")
