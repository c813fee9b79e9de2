"""SQLAlchemy ORM models.

Column types are kept portable (``Uuid``, ``Text``) so the same models run on
PostgreSQL in production and SQLite locally.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    name = Column(Text, nullable=False, default="")
    role = Column(String, nullable=False, default="member")
    avatar_url = Column(Text, nullable=True)

    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_active_date = Column(Date, nullable=True)

    spotify_access_token = Column(Text, nullable=True)
    spotify_refresh_token = Column(Text, nullable=True)
    spotify_token_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class UserSettingsModel(Base):
    __tablename__ = "user_settings"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    theme = Column(String, nullable=False, default="system")
    email_notifications = Column(Boolean, nullable=False, default=True)
    landing_page = Column(String, nullable=False, default="dashboard")
    profile_visibility = Column(String, nullable=False, default="spaces")


# ---------------------------------------------------------------------------
# Spaces
# ---------------------------------------------------------------------------


class SpaceModel(Base):
    __tablename__ = "spaces"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    leader_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    access_type = Column(String, nullable=False, default="PUBLIC")
    rotation_type = Column(String, nullable=False, default="ROUND_ROBIN")
    # 0 = Sunday .. 6 = Saturday
    publish_day = Column(Integer, nullable=False, default=0)
    current_week = Column(Integer, nullable=False, default=1)
    current_curator_id = Column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class MembershipModel(Base):
    __tablename__ = "memberships"

    space_id = Column(Uuid, ForeignKey("spaces.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role = Column(String, nullable=False, default="MEMBER")
    joined_at = Column(DateTime(timezone=True), default=_now)
    total_submissions = Column(Integer, nullable=False, default=0)

    user = relationship("UserModel", lazy="raise")


class CuratorRotationModel(Base):
    __tablename__ = "curator_rotations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    space_id = Column(Uuid, ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    week_number = Column(Integer, nullable=False)
    rotated_at = Column(DateTime(timezone=True), default=_now)


# ---------------------------------------------------------------------------
# Weekly content
# ---------------------------------------------------------------------------


class PromptModel(Base):
    __tablename__ = "prompts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    space_id = Column(Uuid, ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False)
    curator_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    week_number = Column(Integer, nullable=False)
    question = Column(Text, nullable=False)
    order = Column(Integer, nullable=False, default=0)
    image_url = Column(Text, nullable=True)
    music_url = Column(Text, nullable=True)
    media_type = Column(String, nullable=False, default="TEXT")
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_now)


class ResponseModel(Base):
    __tablename__ = "responses"
    __table_args__ = (UniqueConstraint("prompt_id", "user_id", name="uq_response_prompt_user"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    prompt_id = Column(Uuid, ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False, default="")
    image_url = Column(Text, nullable=True)
    music_url = Column(Text, nullable=True)
    is_draft = Column(Boolean, nullable=False, default=False)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    user = relationship("UserModel", lazy="raise")
    prompt = relationship("PromptModel", lazy="raise")


class NewsletterModel(Base):
    __tablename__ = "newsletters"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    space_id = Column(Uuid, ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False)
    week_number = Column(Integer, nullable=False)
    curator_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text, nullable=False)
    theme = Column(Text, nullable=True)
    footer_note = Column(Text, nullable=True)
    body = Column(Text, nullable=False, default="")
    is_published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    public_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)


# ---------------------------------------------------------------------------
# Enumerated column values
# ---------------------------------------------------------------------------


class MembershipRole(str, Enum):
    LEADER = "LEADER"
    CURATOR = "CURATOR"
    MEMBER = "MEMBER"


class AccessType(str, Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class MediaType(str, Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    MUSIC = "MUSIC"
    VIDEO = "VIDEO"
