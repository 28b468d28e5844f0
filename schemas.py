"""
Database Schemas for the Project Tracker

Each Pydantic model represents a MongoDB collection. The collection name is
the snake_case form of the class name, e.g. WorkLog -> "work_log".
"""
from datetime import datetime
from enum import Enum
from typing import Optional, Literal

from pydantic import BaseModel, Field, EmailStr, field_validator, model_validator


# Enums
class Role(str, Enum):
    ADMIN = "Admin"
    USER = "User"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Accept the current labels and the legacy PM/Team ones."""
        legacy = {"PM": cls.ADMIN, "Team": cls.USER}
        if value in legacy:
            return legacy[value]
        return cls(value)


class ProjectStatus(str, Enum):
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    REVIEW = "Review"
    COMPLETED = "Completed"


class Timeframe(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# Users
class User(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Full name")
    email: EmailStr = Field(..., description="Unique email")
    password: str = Field(..., min_length=6, description="Plain password on create; stored hashed")
    role: Role
    rank: Optional[str] = Field(None, max_length=50)
    specialization: Optional[str] = Field(None, max_length=50)

    @field_validator("email")
    @classmethod
    def _email_length(cls, v):
        if len(v) > 150:
            raise ValueError("Email must be less than 150 characters")
        return v

    @field_validator("role", mode="before")
    @classmethod
    def _normalise_role(cls, v):
        if isinstance(v, str):
            return Role.parse(v)
        return v


class UserPublic(BaseModel):
    """User as returned by the API: no password, no bookkeeping fields."""
    id: str
    name: str
    email: EmailStr
    role: str = Field(..., description="Stored role label; interpreted by the access checks")
    rank: Optional[str] = None
    specialization: Optional[str] = None


# Projects
class Project(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    type: str = Field(..., min_length=1, max_length=50, description="Free-text category, e.g. SEO, webflow")
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    admin_id: str = Field(..., description="User id of the owning admin")
    deadline: Optional[str] = Field(None, description="ISO date string")


# Tasks
class Task(BaseModel):
    project_id: str
    name: str = Field(..., min_length=1, max_length=150)
    type: Optional[str] = Field(None, max_length=50)
    status: TaskStatus = TaskStatus.TODO
    assigned_user_id: Optional[str] = None
    estimate_hours: Optional[float] = Field(None, gt=0, le=999.99)


# Work logs
class WorkLog(BaseModel):
    user_id: str
    project_id: str
    task_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    note: Optional[str] = None

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


# Status history
class StatusHistory(BaseModel):
    entity_type: Literal["project", "task"]
    entity_id: str
    status: str = Field(..., min_length=1, max_length=20)
    updated_by: str


# -----------------------------
# Request bodies
# -----------------------------
class SignupRequest(User):
    confirm_password: Optional[str] = None

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords don't match")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    type: str = Field(..., min_length=1, max_length=50)
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    deadline: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    status: Optional[ProjectStatus] = None
    deadline: Optional[str] = None


class TaskCreate(BaseModel):
    project_id: str
    name: str = Field(..., min_length=1, max_length=150)
    type: Optional[str] = Field(None, max_length=50)
    status: TaskStatus = TaskStatus.TODO
    assigned_user_id: Optional[str] = None
    estimate_hours: Optional[float] = Field(None, gt=0, le=999.99)


class TaskUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    type: Optional[str] = Field(None, max_length=50)
    status: Optional[TaskStatus] = None
    assigned_user_id: Optional[str] = None
    estimate_hours: Optional[float] = Field(None, gt=0, le=999.99)


class TimerStartRequest(BaseModel):
    task_id: str


class TimerConfirmRequest(BaseModel):
    note: Optional[str] = None
