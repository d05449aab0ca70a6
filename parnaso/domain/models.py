"""
Application-level record shapes.

Field names are snake_case in Python and camelCase on the wire (API bodies,
local store values, backup files), via the alias generator.
"""
from __future__ import annotations

import datetime as dt
import uuid
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class AppModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_app(self) -> dict:
        """Wire/storage representation (camelCase, None fields dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class User(AppModel):
    id: str
    name: str
    email: str
    role: Literal["admin", "user"] = "user"
    is_blocked: bool = False


class UserSettings(AppModel):
    daily_word_goal: int = Field(ge=0)
    weekly_word_goal: int = Field(ge=0)


class Project(AppModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    target_word_count: int = Field(default=0, ge=0)
    color: Optional[str] = None
    status: Literal["active", "paused", "completed", "archived"] = "active"
    created_at: str = Field(default_factory=utc_now_iso)


class WritingSession(AppModel):
    # unknown self-report fields are kept and travel in the JSON blob
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(default_factory=new_id)
    project_id: Optional[str] = None
    date: str
    word_count: int = Field(default=0, ge=0)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    stress_level: Optional[int] = Field(default=None, ge=1, le=5)
    difficulty_level: Optional[int] = Field(default=None, ge=1, le=5)
    was_multitasking: Optional[bool] = None
    multitasking_apps: Optional[list[str]] = None
    used_reward: Optional[bool] = None
    used_time_strategy: Optional[bool] = None
    time_strategy: Optional[str] = None
    session_rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _date_part(cls, v: str) -> str:
        # accepts YYYY-MM-DD or a full ISO timestamp
        s = (v or "").strip()
        try:
            if len(s) > 10:
                return dt.datetime.fromisoformat(s.replace("Z", "+00:00")).date().isoformat()
            return dt.date.fromisoformat(s).isoformat()
        except ValueError:
            raise ValueError("date must be YYYY-MM-DD")

    @field_validator("project_id")
    @classmethod
    def _blank_project(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class UserData(AppModel):
    sessions: list[WritingSession] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    settings: UserSettings

    def to_app(self) -> dict:
        return {
            "sessions": [s.to_app() for s in self.sessions],
            "projects": [p.to_app() for p in self.projects],
            "settings": self.settings.to_app(),
        }
