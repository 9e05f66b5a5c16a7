"""Documents table backing SqlDocumentStore.

One row per document path; `collection` is the parent collection path used by
id-list lookups and collection queries.

Revision ID: 001
Revises:
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("path", sa.String(512), primary_key=True),
        sa.Column("collection", sa.String(512), nullable=False),
        sa.Column("doc_id", sa.String(256), nullable=False),
        sa.Column("data", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_documents_collection", "documents", ["collection"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_documents_collection", table_name="documents")
    op.drop_table("documents")
