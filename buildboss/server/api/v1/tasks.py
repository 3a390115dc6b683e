"""
Tasks API Endpoints.

Tasks live inside projects. Visibility follows company membership; edits are
open to company editors, the task's creator and its assignee. Assigning or
completing a task notifies the people involved.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import column_values, utc_now
from buildboss.core.database.entities.projects import Task
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories import (
    CompanyRepository,
    ProjectRepository,
    TaskRepository,
    UserRepository,
    WorkerRepository,
)
from buildboss.core.errors import BadRequestError, ForbiddenError, NotFoundError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import NotificationType, Priority, TaskStatus, WorkerStatus
from buildboss.core.models.io import TaskCreate, TaskRead, TaskStatusUpdate, TaskUpdate, UserSummary
from buildboss.server.services.access import CompanyAccess, require_editor, require_member
from buildboss.server.services.deps import CurrentUserDep, SessionDep
from buildboss.server.services.notifications import create_notification

from .projects import load_project

logger = get_logger(__name__)

router = APIRouter(tags=["tasks"])


async def _to_read(session: AsyncSession, tasks: list[Task]) -> list[TaskRead]:
    assignees = await UserRepository(session).get_many([t.assigned_to_id for t in tasks if t.assigned_to_id])
    items = []
    for task in tasks:
        read = TaskRead.model_validate(task)
        assignee = assignees.get(task.assigned_to_id) if task.assigned_to_id else None
        read.assigned_to = UserSummary.model_validate(assignee) if assignee else None
        items.append(read)
    return items


async def _load_task(session: AsyncSession, task_id: str, user: User) -> tuple[Task, CompanyAccess]:
    task = await TaskRepository(session).get_by_id(task_id)
    if task is None:
        raise NotFoundError("Task not found")
    try:
        _, access = await load_project(session, task.project_id, user)
    except NotFoundError:
        raise NotFoundError("Task not found")
    return task, access


async def _check_assignee(session: AsyncSession, access: CompanyAccess, assignee_id: str) -> None:
    """The assignee must be the company owner or one of its active workers."""
    if assignee_id == access.company.created_by_id:
        return
    worker = await WorkerRepository(session).get_membership(assignee_id, access.company.id)
    if worker is None or worker.status != WorkerStatus.ACTIVE.value:
        raise BadRequestError("Assigned user must be an active worker of the company")


async def _notify_assigned(session: AsyncSession, task: Task, user: User) -> None:
    if not task.assigned_to_id or task.assigned_to_id == user.id:
        return
    await create_notification(
        session,
        task.assigned_to_id,
        NotificationType.TASK_ASSIGNED,
        "New task assigned",
        f"You have been assigned to the task '{task.title}'",
        {"task_id": task.id, "project_id": task.project_id},
    )


async def _apply_task_changes(
    session: AsyncSession, task: Task, access: CompanyAccess, changes: Dict[str, Any], user: User
) -> Task:
    """
    Update a task and emit the notifications the change implies.

    Only company editors, the task's creator and its assignee may change a
    task. Moving to ``DONE`` stamps ``completed_at`` and tells the creator;
    a new assignee is validated and told about the task.
    """
    if not (access.can_edit or task.created_by_id == user.id or task.assigned_to_id == user.id):
        raise ForbiddenError("You do not have permission to update this task")

    changes = column_values(changes)
    reassigned = "assigned_to_id" in changes and changes["assigned_to_id"] != task.assigned_to_id
    if reassigned and changes["assigned_to_id"]:
        await _check_assignee(session, access, changes["assigned_to_id"])
    completed = changes.get("status") == TaskStatus.DONE.value and task.status != TaskStatus.DONE.value
    if completed:
        changes["completed_at"] = utc_now()
    elif changes.get("status") and changes["status"] != TaskStatus.DONE.value:
        changes["completed_at"] = None

    task = await TaskRepository(session).apply_update(task, changes)
    if reassigned:
        await _notify_assigned(session, task, user)
    if completed and task.created_by_id != user.id:
        await create_notification(
            session,
            task.created_by_id,
            NotificationType.TASK_COMPLETED,
            "Task completed",
            f"The task '{task.title}' has been completed",
            {"task_id": task.id, "project_id": task.project_id},
        )
    return task


@router.get(
    "",
    summary="List Tasks",
    description="Tasks in projects of companies the user belongs to.",
)
async def list_tasks(
    user: CurrentUserDep,
    session: SessionDep,
    project_id: Optional[str] = None,
    company_id: Optional[str] = None,
    status_filter: Optional[TaskStatus] = Query(default=None, alias="status"),
    priority: Optional[Priority] = None,
    assigned_to_id: Optional[str] = None,
    search: Optional[str] = Query(default=None, max_length=100),
):
    filters = {
        "project_id": project_id,
        "company_id": company_id,
        "status": status_filter.value if status_filter else None,
        "priority": priority.value if priority else None,
        "assigned_to_id": assigned_to_id,
        "search": search,
        "company_ids": CompanyRepository(session).accessible_ids_statement(user.id),
    }
    tasks = await TaskRepository(session).list(filters=filters)
    return {"tasks": await _to_read(session, tasks)}


@router.get(
    "/my",
    summary="My Tasks",
    description="Tasks assigned to the signed-in user.",
)
async def my_tasks(
    user: CurrentUserDep,
    session: SessionDep,
    status_filter: Optional[TaskStatus] = Query(default=None, alias="status"),
):
    filters = {
        "assigned_to_id": user.id,
        "status": status_filter.value if status_filter else None,
        "company_ids": CompanyRepository(session).accessible_ids_statement(user.id),
    }
    tasks = await TaskRepository(session).list(filters=filters)
    return {"tasks": await _to_read(session, tasks)}


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    summary="Get Task",
    responses={404: {"description": "Task not found or not accessible"}},
)
async def get_task(task_id: str, user: CurrentUserDep, session: SessionDep) -> TaskRead:
    task, _ = await _load_task(session, task_id, user)
    return (await _to_read(session, [task]))[0]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=TaskRead,
    summary="Create Task",
    description="Create a task in a project. Requires edit permission in the project's company.",
    responses={
        400: {"description": "Invalid assignee"},
        403: {"description": "No edit permission"},
        404: {"description": "Project not found"},
    },
)
async def create_task(payload: TaskCreate, user: CurrentUserDep, session: SessionDep) -> TaskRead:
    project = await ProjectRepository(session).get_by_id(payload.project_id)
    if project is None:
        raise NotFoundError("Project not found")
    try:
        await require_member(session, project.company_id, user)
    except NotFoundError:
        raise NotFoundError("Project not found")
    access = await require_editor(session, project.company_id, user)
    if payload.assigned_to_id:
        await _check_assignee(session, access, payload.assigned_to_id)

    values = column_values(payload.model_dump())
    if payload.status == TaskStatus.DONE:
        values["completed_at"] = utc_now()
    task = await TaskRepository(session).create(Task(**values, created_by_id=user.id))
    logger.info(f"Task {task.id} created in project {project.id}")
    await _notify_assigned(session, task, user)
    return (await _to_read(session, [task]))[0]


@router.put(
    "/{task_id}",
    response_model=TaskRead,
    summary="Update Task",
    description="Edit a task. Allowed for company editors, the creator and the assignee.",
)
async def update_task(task_id: str, payload: TaskUpdate, user: CurrentUserDep, session: SessionDep) -> TaskRead:
    task, access = await _load_task(session, task_id, user)
    task = await _apply_task_changes(session, task, access, payload.model_dump(exclude_unset=True), user)
    return (await _to_read(session, [task]))[0]


@router.patch(
    "/{task_id}/status",
    response_model=TaskRead,
    summary="Change Task Status",
    description="Move a task to another status with the same rules as a full update.",
)
async def update_task_status(
    task_id: str, payload: TaskStatusUpdate, user: CurrentUserDep, session: SessionDep
) -> TaskRead:
    task, access = await _load_task(session, task_id, user)
    task = await _apply_task_changes(session, task, access, {"status": payload.status}, user)
    return (await _to_read(session, [task]))[0]


@router.delete(
    "/{task_id}",
    summary="Delete Task",
    description="Delete a task. Allowed for the company owner, company editors and the creator.",
)
async def delete_task(task_id: str, user: CurrentUserDep, session: SessionDep):
    task, access = await _load_task(session, task_id, user)
    if not (access.is_owner or access.can_edit or task.created_by_id == user.id):
        raise ForbiddenError("You do not have permission to delete this task")
    await TaskRepository(session).delete(task.id)
    logger.info(f"Task {task_id} deleted by user {user.id}")
    return {"success": True, "message": "Task deleted"}
