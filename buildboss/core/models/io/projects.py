"""
Project and task I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, EmailStr, Field

from buildboss.core.models.domain.enums import Priority, ProjectStatus, TaskStatus

from .common import PartialUpdate
from .users import UserSummary


class ProjectRead(BaseModel):
    """Schema for reading a project from API."""

    id: str
    name: str
    description: Optional[str] = None
    status: str
    priority: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    budget: Optional[float] = None
    location: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    company_id: str
    created_by_id: str
    created_at: datetime
    updated_at: datetime
    task_count: Optional[int] = None

    class Config:
        from_attributes = True


class ProjectCreate(BaseModel):
    """Schema for creating a project via API."""

    name: str = Field(min_length=2, max_length=100)
    company_id: str = Field(min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    budget: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = Field(default=None, max_length=200)
    client_name: Optional[str] = Field(default=None, max_length=100)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(default=None, max_length=32)


class ProjectUpdate(PartialUpdate):
    """Schema for updating a project via API."""

    non_nullable = ("name", "status", "priority")

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    budget: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = Field(default=None, max_length=200)
    client_name: Optional[str] = Field(default=None, max_length=100)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(default=None, max_length=32)


class ProjectStats(BaseModel):
    total_tasks: int
    tasks_by_status: Dict[str, int]
    tasks_by_priority: Dict[str, int]
    estimated_hours: float
    actual_hours: float
    overdue_tasks: int
    completion_rate: int


class TaskRead(BaseModel):
    """Schema for reading a task from API."""

    id: str
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    completed_at: Optional[datetime] = None
    project_id: str
    assigned_to_id: Optional[str] = None
    created_by_id: str
    created_at: datetime
    updated_at: datetime
    assigned_to: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class TaskCreate(BaseModel):
    """Schema for creating a task via API."""

    title: str = Field(min_length=2, max_length=200)
    project_id: str = Field(min_length=1)
    description: Optional[str] = Field(default=None, max_length=2000)
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    assigned_to_id: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0, le=1000)


class TaskUpdate(PartialUpdate):
    """Schema for updating a task via API."""

    non_nullable = ("title", "status", "priority")

    title: Optional[str] = Field(default=None, min_length=2, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    assigned_to_id: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0, le=1000)
    actual_hours: Optional[float] = Field(default=None, ge=0, le=1000)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus
