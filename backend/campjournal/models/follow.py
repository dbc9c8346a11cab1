"""
Follow edge between two users.
"""
from sqlalchemy import Column, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.sql import func
import uuid

from campjournal.core.database import Base, table_args, fk, utcnow


class Follow(Base):
    __tablename__ = "follows"
    __table_args__ = table_args(
        UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        CheckConstraint("follower_id <> following_id", name="no_self_follow"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    follower_id = Column(Uuid, ForeignKey(fk("users.user_id"), ondelete="CASCADE"), nullable=False, index=True)
    following_id = Column(Uuid, ForeignKey(fk("users.user_id"), ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())

    def __repr__(self):
        return f"<Follow {self.follower_id} -> {self.following_id}>"
