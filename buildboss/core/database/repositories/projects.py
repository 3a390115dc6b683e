"""
Project and task repositories.

Data access for projects and their tasks, including the aggregates behind the
project statistics endpoint.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlmodel import select

from buildboss.core.models.domain.enums import TaskStatus

from ..entities.companies import Company
from ..entities.projects import Project, Task
from .base import BaseRepository, QueryBuilder


class ProjectRepository(BaseRepository[Project]):
    """Repository for project data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, Project)

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Project]:
        """List projects, newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``company_id``, ``company_ids`` (statement or list), ``status``,
                ``priority`` and ``search`` (name, description, location or client name)

        Returns:
            List of Project instances
        """
        filters = filters or {}
        stmt = QueryBuilder.apply_filters(
            select(Project),
            Project,
            {key: filters.get(key) for key in ("company_id", "status", "priority")},
        )
        if filters.get("company_ids") is not None:
            stmt = stmt.where(Project.company_id.in_(filters["company_ids"]))
        stmt = QueryBuilder.apply_search(
            stmt,
            [Project.name, Project.description, Project.location, Project.client_name],
            filters.get("search"),
        )
        stmt = QueryBuilder.apply_pagination(stmt.order_by(Project.created_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_in_owned_companies(self, user_id: str) -> int:
        """Projects of every company the user owns."""
        owned = select(Company.id).where(Company.created_by_id == user_id)
        return await self.count(Project.company_id.in_(owned))

    async def task_counts(self, project_ids: List[str]) -> Dict[str, int]:
        """Number of tasks per project."""
        if not project_ids:
            return {}
        stmt = select(Task.project_id, func.count()).where(Task.project_id.in_(project_ids)).group_by(Task.project_id)
        result = await self.session.execute(stmt)
        return {project_id: int(count) for project_id, count in result.all()}


class TaskRepository(BaseRepository[Task]):
    """Repository for task data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, Task)

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Task]:
        """List tasks, newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``project_id``, ``company_id``, ``company_ids`` (statement or
                list restricting visible companies), ``status``, ``priority``,
                ``assigned_to_id`` and ``search`` (title or description)

        Returns:
            List of Task instances
        """
        filters = filters or {}
        stmt = QueryBuilder.apply_filters(
            select(Task),
            Task,
            {key: filters.get(key) for key in ("project_id", "status", "priority", "assigned_to_id")},
        )
        if filters.get("company_id"):
            stmt = stmt.where(Task.project_id.in_(select(Project.id).where(Project.company_id == filters["company_id"])))
        if filters.get("company_ids") is not None:
            stmt = stmt.where(
                Task.project_id.in_(select(Project.id).where(Project.company_id.in_(filters["company_ids"])))
            )
        stmt = QueryBuilder.apply_search(stmt, [Task.title, Task.description], filters.get("search"))
        stmt = QueryBuilder.apply_pagination(stmt.order_by(Task.created_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_project(self, project_id: str) -> int:
        return await self.count(Task.project_id == project_id)

    async def count_by(self, project_id: str, column) -> Dict[str, int]:
        """Task counts of a project grouped by ``column`` (status or priority)."""
        stmt = select(column, func.count()).where(Task.project_id == project_id).group_by(column)
        result = await self.session.execute(stmt)
        return {key: int(count) for key, count in result.all()}

    async def hour_totals(self, project_id: str) -> Dict[str, float]:
        """Sum of estimated and actual hours of a project's tasks."""
        stmt = select(
            func.coalesce(func.sum(Task.estimated_hours), 0),
            func.coalesce(func.sum(Task.actual_hours), 0),
        ).where(Task.project_id == project_id)
        result = await self.session.execute(stmt)
        estimated, actual = result.one()
        return {"estimated": float(estimated), "actual": float(actual)}

    async def count_overdue(self, project_id: str, now: datetime) -> int:
        """Tasks past their due date that are neither done nor cancelled."""
        return await self.count(
            Task.project_id == project_id,
            Task.due_date < now,
            Task.status.not_in([TaskStatus.DONE.value, TaskStatus.CANCELLED.value]),
        )
