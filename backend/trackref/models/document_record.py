"""DocumentRecord ORM - one row per workspace entity, any kind.

Invariants:
    - kind is an EntityKind value; (kind, id) identifies a record
    - Collection members (issues, tag references) carry attached_to / collection
    - attributes holds every field that is not a column
    - revision grows by one on every update; writers compare-and-set on it

Design Decisions:
    - Single generic table: the store contract is document-shaped, and the
      resolution layer never joins across kinds
    - modified_on as epoch milliseconds, matching the records other clients write
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from trackref.db.base import Base


class DocumentRecord(Base):
    """A stored entity of any kind."""
    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_kind_space", "kind", "space"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[str] = mapped_column(String(100), nullable=False)
    space: Mapped[str | None] = mapped_column(String(64), nullable=True)
    attached_to: Mapped[str | None] = mapped_column(String(64), nullable=True)
    attached_to_kind: Mapped[str | None] = mapped_column(
        String(100), nullable=True,
    )
    collection: Mapped[str | None] = mapped_column(String(100), nullable=True)
    attributes: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    modified_on: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
