"""Stored document: one row per document path (collection path + id), fields as JSON.

Backs SqlDocumentStore so the service can run without a hosted document database.
"""
from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from crewnotify.db.base import Base


class DocumentRow(Base):
    __tablename__ = "documents"

    path = Column(String(512), primary_key=True)  # e.g. crews/c1/events/e1
    collection = Column(String(512), nullable=False, index=True)  # e.g. crews/c1/events
    doc_id = Column(String(256), nullable=False)
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
