"""
User and Profile models.

`users` holds credentials; `profiles` is the public, 1:1 record keyed by the
same id that other users search, follow, and share with.
"""
from sqlalchemy import Column, String, Text, TIMESTAMP, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from campjournal.core.database import Base, table_args, fk, utcnow


class User(Base):
    """Authentication account."""

    __tablename__ = "users"
    __table_args__ = table_args()

    user_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)  # Soft delete

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"


class Profile(Base):
    """Public profile shown in search, feeds, and on shared entries."""

    __tablename__ = "profiles"
    __table_args__ = table_args()

    id = Column(Uuid, ForeignKey(fk("users.user_id"), ondelete="CASCADE"), primary_key=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    website = Column(String(500), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile @{self.username}>"
