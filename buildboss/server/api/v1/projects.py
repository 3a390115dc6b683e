"""
Projects API Endpoints.

Projects belong to a company. Members of the company can read them, editors
create and update them, and the company owner or the project's creator can
delete an empty project.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import column_values, utc_now
from buildboss.core.database.entities.projects import Project, Task
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories import CompanyRepository, ProjectRepository, TaskRepository
from buildboss.core.errors import BadRequestError, ForbiddenError, NotFoundError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import Priority, ProjectStatus, ResourceType, TaskStatus
from buildboss.core.models.io import ProjectCreate, ProjectRead, ProjectStats, ProjectUpdate
from buildboss.server.services.access import CompanyAccess, require_editor, require_member
from buildboss.server.services.deps import CurrentUserDep, SessionDep
from buildboss.server.services.subscription_limits import check_resource_limit

logger = get_logger(__name__)

router = APIRouter(tags=["projects"])


async def load_project(session: AsyncSession, project_id: str, user: User) -> tuple[Project, CompanyAccess]:
    """Project visible to the user through membership of its company, otherwise 404."""
    project = await ProjectRepository(session).get_by_id(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    try:
        access = await require_member(session, project.company_id, user)
    except NotFoundError:
        raise NotFoundError("Project not found")
    return project, access


async def project_stats(session: AsyncSession, project_id: str) -> ProjectStats:
    """Task breakdown, hour totals, overdue count and completion rate of a project."""
    tasks = TaskRepository(session)
    by_status = await tasks.count_by(project_id, Task.status)
    by_priority = await tasks.count_by(project_id, Task.priority)
    hours = await tasks.hour_totals(project_id)
    total = sum(by_status.values())
    done = by_status.get(TaskStatus.DONE.value, 0)
    return ProjectStats(
        total_tasks=total,
        tasks_by_status={s.value: by_status.get(s.value, 0) for s in TaskStatus},
        tasks_by_priority={p.value: by_priority.get(p.value, 0) for p in Priority},
        estimated_hours=hours["estimated"],
        actual_hours=hours["actual"],
        overdue_tasks=await tasks.count_overdue(project_id, utc_now()),
        completion_rate=round(done / total * 100) if total else 0,
    )


@router.get(
    "",
    summary="List Projects",
    description="Projects of one company, or of every company the user belongs to.",
    responses={404: {"description": "Company not found or not accessible"}},
)
async def list_projects(
    user: CurrentUserDep,
    session: SessionDep,
    company_id: Optional[str] = None,
    status_filter: Optional[ProjectStatus] = Query(default=None, alias="status"),
    priority: Optional[Priority] = None,
    search: Optional[str] = Query(default=None, max_length=100),
):
    filters = {
        "status": status_filter.value if status_filter else None,
        "priority": priority.value if priority else None,
        "search": search,
    }
    if company_id:
        await require_member(session, company_id, user)
        filters["company_id"] = company_id
    else:
        filters["company_ids"] = CompanyRepository(session).accessible_ids_statement(user.id)

    projects_repo = ProjectRepository(session)
    projects = await projects_repo.list(filters=filters)
    counts = await projects_repo.task_counts([project.id for project in projects])
    items = []
    for project in projects:
        read = ProjectRead.model_validate(project)
        read.task_count = counts.get(project.id, 0)
        items.append(read)
    return {"projects": items}


@router.get(
    "/{project_id}",
    summary="Get Project",
    description="Project details with task statistics.",
    responses={404: {"description": "Project not found or not accessible"}},
)
async def get_project(project_id: str, user: CurrentUserDep, session: SessionDep):
    project, access = await load_project(session, project_id, user)
    stats = await project_stats(session, project.id)
    read = ProjectRead.model_validate(project)
    read.task_count = stats.total_tasks
    return {"project": read, "stats": stats, "can_edit": access.can_edit}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProjectRead,
    summary="Create Project",
    description="Create a project in a company the user may edit.",
    responses={
        400: {"description": "Missing name or company"},
        403: {"description": "No edit permission or plan limit reached"},
    },
)
async def create_project(payload: ProjectCreate, user: CurrentUserDep, session: SessionDep) -> ProjectRead:
    await check_resource_limit(session, user, ResourceType.PROJECTS)
    await require_editor(session, payload.company_id, user)
    values = column_values(payload.model_dump())
    project = await ProjectRepository(session).create(Project(**values, created_by_id=user.id))
    logger.info(f"Project {project.id} created in company {project.company_id}")
    read = ProjectRead.model_validate(project)
    read.task_count = 0
    return read


@router.put(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Update Project",
    description="Edit a project. Requires edit permission in its company.",
)
async def update_project(
    project_id: str, payload: ProjectUpdate, user: CurrentUserDep, session: SessionDep
) -> ProjectRead:
    project, access = await load_project(session, project_id, user)
    if not access.can_edit:
        raise ForbiddenError("You do not have permission to edit this project")
    changes = column_values(payload.model_dump(exclude_unset=True))
    project = await ProjectRepository(session).apply_update(project, changes)
    return ProjectRead.model_validate(project)


@router.delete(
    "/{project_id}",
    summary="Delete Project",
    description="Delete a project without tasks. Company owner or project creator only.",
    responses={400: {"description": "Project still has tasks"}, 403: {"description": "Not allowed"}},
)
async def delete_project(project_id: str, user: CurrentUserDep, session: SessionDep):
    project, access = await load_project(session, project_id, user)
    if not (access.is_owner or project.created_by_id == user.id):
        raise ForbiddenError("Only the company owner or the project creator can delete this project")
    if await TaskRepository(session).count_for_project(project.id):
        raise BadRequestError("Cannot delete a project that still has tasks")
    await ProjectRepository(session).delete(project.id)
    logger.info(f"Project {project_id} deleted by user {user.id}")
    return {"success": True, "message": "Project deleted"}


@router.get(
    "/{project_id}/stats",
    response_model=ProjectStats,
    summary="Project Statistics",
    description="Task counts by status and priority, hours, overdue tasks and completion rate.",
)
async def get_project_stats(project_id: str, user: CurrentUserDep, session: SessionDep) -> ProjectStats:
    project, _ = await load_project(session, project_id, user)
    return await project_stats(session, project.id)
