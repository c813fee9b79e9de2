"""Pydantic request/response models for REST API."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from monogram.permissions import UserRole
from monogram.rotation import RotationType
from monogram_service.auth.passwords import check_password_policy
from monogram_service.db.models import AccessType, MediaType, MembershipRole

# === Shared Validators ===

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
HTML_TAG_PATTERN = re.compile(r"</?[a-zA-Z][^>]*>")


def strip_html_tags(text: str | None) -> str | None:
    """Strip HTML tags, keeping bare angle brackets ("a < b")."""
    if not text:
        return text
    return HTML_TAG_PATTERN.sub("", text)


def clean_required_text(text: str, label: str) -> str:
    """Strip tags and surrounding whitespace, rejecting text that was only markup."""
    cleaned = strip_html_tags(text).strip()
    if not cleaned:
        raise ValueError(f"{label} cannot be empty")
    return cleaned


def validate_email_format(email: str) -> str:
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError(f"Invalid email format: {email}")
    return email


# === Auth ===


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.MEMBER

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        return validate_email_format(v)

    @field_validator("password")
    @classmethod
    def password_policy(cls, v: str) -> str:
        return check_password_policy(v)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str) -> str:
        return clean_required_text(v, "Name")


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserSchema(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole
    avatar_url: str | None = None
    current_streak: int = 0
    longest_streak: int = 0
    spotify_connected: bool = False
    created_at: datetime | None = None


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    avatar_url: str | None = None
    role: UserRole | None = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str | None) -> str | None:
        return clean_required_text(v, "Name") if v is not None else v


# === Settings ===

Theme = Literal["light", "dark", "system"]
LandingPage = Literal["dashboard", "last-space"]
ProfileVisibility = Literal["public", "spaces", "private"]


class SettingsSchema(BaseModel):
    theme: Theme = "system"
    email_notifications: bool = True
    landing_page: LandingPage = "dashboard"
    profile_visibility: ProfileVisibility = "spaces"


class UpdateSettingsRequest(BaseModel):
    theme: Theme | None = None
    email_notifications: bool | None = None
    landing_page: LandingPage | None = None
    profile_visibility: ProfileVisibility | None = None


# === Spaces ===


class CreateSpaceRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    access_type: AccessType = AccessType.PUBLIC
    rotation_type: RotationType = RotationType.ROUND_ROBIN
    publish_day: int = Field(default=0, ge=0, le=6, description="0 = Sunday")

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str | None) -> str | None:
        return clean_required_text(v, "Space name") if v is not None else v

    @field_validator("description")
    @classmethod
    def clean_description(cls, v: str | None) -> str | None:
        return strip_html_tags(v.strip()) if v else v


class UpdateSpaceRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    access_type: AccessType | None = None
    rotation_type: RotationType | None = None
    publish_day: int | None = Field(default=None, ge=0, le=6)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str | None) -> str | None:
        return clean_required_text(v, "Space name") if v is not None else v

    @field_validator("description")
    @classmethod
    def clean_description(cls, v: str | None) -> str | None:
        return strip_html_tags(v.strip()) if v else v


class SpaceSchema(BaseModel):
    id: str
    name: str
    description: str | None = None
    leader_id: str
    access_type: AccessType
    rotation_type: RotationType
    publish_day: int
    current_week: int
    current_curator_id: str | None = None
    is_published: bool = False
    member_count: int = 0
    role: UserRole | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SpaceListResponse(BaseModel):
    spaces: list[SpaceSchema]
    total: int


class JoinSpaceRequest(BaseModel):
    invite_code: str | None = None


class MemberSchema(BaseModel):
    user_id: str
    name: str
    email: str
    avatar_url: str | None = None
    role: MembershipRole
    joined_at: datetime | None = None
    total_submissions: int = 0


class MemberRoleRequest(BaseModel):
    role: MembershipRole


class AssignCuratorRequest(BaseModel):
    user_id: UUID


class RotationSchema(BaseModel):
    id: str
    user_id: str
    week_number: int
    rotated_at: datetime | None = None


class RotateResponse(BaseModel):
    rotated: bool
    curator_id: str | None = None
    space: SpaceSchema


class PermissionsResponse(BaseModel):
    role: UserRole
    capabilities: list[str]


# === Prompts & responses ===


class PromptInput(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)
    order: int | None = None
    image_url: str | None = None
    music_url: str | None = None
    media_type: MediaType = MediaType.TEXT

    @field_validator("question")
    @classmethod
    def clean_question(cls, v: str) -> str:
        return clean_required_text(v, "Question")


class CreatePromptsRequest(BaseModel):
    week_number: int | None = Field(default=None, ge=1)
    prompts: list[PromptInput] = Field(..., min_length=1, max_length=10)


class PromptSchema(BaseModel):
    id: str
    space_id: str
    curator_id: str
    week_number: int
    question: str
    order: int
    image_url: str | None = None
    music_url: str | None = None
    media_type: MediaType = MediaType.TEXT
    is_published: bool = False
    created_at: datetime | None = None


class PublishPromptsResponse(BaseModel):
    week_number: int
    published: int


class SubmitResponseRequest(BaseModel):
    content: str = Field(default="", max_length=20000)
    image_url: str | None = None
    music_url: str | None = None
    is_draft: bool = False

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: str) -> str:
        return strip_html_tags(v)


class ResponseSchema(BaseModel):
    id: str
    prompt_id: str
    user_id: str
    author_name: str | None = None
    content: str
    image_url: str | None = None
    music_url: str | None = None
    is_draft: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


# === Newsletters ===


class GenerateNewsletterRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    theme: str | None = Field(default=None, max_length=200)
    footer_note: str | None = Field(default=None, max_length=1000)
    week_number: int | None = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def clean_title(cls, v: str) -> str:
        return clean_required_text(v, "Title")

    @field_validator("theme", "footer_note")
    @classmethod
    def clean_text(cls, v: str | None) -> str | None:
        return strip_html_tags(v.strip()) if v else v


class NewsletterSchema(BaseModel):
    id: str
    space_id: str
    week_number: int
    curator_id: str | None = None
    title: str
    theme: str | None = None
    footer_note: str | None = None
    body: str
    is_published: bool = False
    published_at: datetime | None = None
    public_url: str | None = None
    created_at: datetime | None = None


# === Spotify ===


class AuthorizeResponse(BaseModel):
    url: str


class SpotifyStatusSchema(BaseModel):
    connected: bool
    expires_at: datetime | None = None


class PlaylistRequest(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    description: str = Field(default="", max_length=300)
    week_number: int | None = Field(default=None, ge=1)


class PlaylistResponse(BaseModel):
    id: str
    name: str
    url: str | None = None
    track_count: int
