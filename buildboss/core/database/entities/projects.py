"""
Project and task entity models.

Projects belong to a company; tasks belong to a project and may be assigned
to the company owner or one of its active workers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, Text

from buildboss.core.models.domain.enums import Priority, ProjectStatus, TaskStatus

from ..base import Base, new_id, utc_now


class Project(Base, table=True):
    """Construction project run by a company.

    Table: projects
    """

    __tablename__ = "projects"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    name: str = Field(max_length=100, index=True)
    description: Optional[str] = Field(default=None, sa_type=Text)
    status: str = Field(default=ProjectStatus.PLANNING.value, max_length=16, index=True)
    priority: str = Field(default=Priority.MEDIUM.value, max_length=16, index=True)

    start_date: Optional[datetime] = Field(default=None)
    end_date: Optional[datetime] = Field(default=None)
    deadline: Optional[datetime] = Field(default=None)
    budget: Optional[float] = Field(default=None)
    location: Optional[str] = Field(default=None, max_length=200)
    client_name: Optional[str] = Field(default=None, max_length=100)
    client_email: Optional[str] = Field(default=None, max_length=255)
    client_phone: Optional[str] = Field(default=None, max_length=32)

    company_id: str = Field(foreign_key="companies.id", index=True, max_length=32)
    created_by_id: str = Field(foreign_key="users.id", index=True, max_length=32)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Project(id={self.id}, name={self.name}, status={self.status})"


class Task(Base, table=True):
    """Unit of work inside a project.

    ``completed_at`` is stamped when the task moves to ``DONE``.

    Table: tasks
    """

    __tablename__ = "tasks"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, sa_type=Text)
    status: str = Field(default=TaskStatus.TODO.value, max_length=16, index=True)
    priority: str = Field(default=Priority.MEDIUM.value, max_length=16, index=True)

    due_date: Optional[datetime] = Field(default=None, index=True)
    estimated_hours: Optional[float] = Field(default=None)
    actual_hours: Optional[float] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)

    project_id: str = Field(foreign_key="projects.id", index=True, max_length=32)
    assigned_to_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True, max_length=32)
    created_by_id: str = Field(foreign_key="users.id", index=True, max_length=32)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Task(id={self.id}, title={self.title}, status={self.status})"
