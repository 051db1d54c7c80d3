"""
ChapterAccess model: durable purchase record (user_chapter_access).
One row per (user_id, chapter_id); blockchain_tx_hash is the payment proof.
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint

from herstories.db.base import Base


class ChapterAccess(Base):
    __tablename__ = "user_chapter_access"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, nullable=False, index=True)
    story_id = Column(String, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True)
    chapter_id = Column(String, ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False)
    purchased_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    # None for records restored by reconciliation
    blockchain_tx_hash = Column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "chapter_id", name="uq_user_chapter_access"),
    )
