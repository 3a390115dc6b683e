"""Unit tests for project and task repositories."""

from __future__ import annotations

from datetime import timedelta

import pytest

from buildboss.core.database.base import utc_now
from buildboss.core.database.entities.companies import Worker
from buildboss.core.database.entities.projects import Project, Task
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories.companies import CompanyRepository
from buildboss.core.database.repositories.projects import ProjectRepository, TaskRepository


@pytest.fixture
async def project(in_memory_session, sample_user, sample_company) -> Project:
    project = Project(
        name="Osiedle Zielone", location="Warszawa", client_name="Deweloper SA",
        company_id=sample_company.id, created_by_id=sample_user.id,
    )
    in_memory_session.add(project)
    await in_memory_session.commit()
    return project


@pytest.fixture
async def tasks(in_memory_session, sample_user, project):
    yesterday = utc_now() - timedelta(days=1)
    rows = [
        Task(title="Fundamenty", status="DONE", priority="HIGH", estimated_hours=10, actual_hours=12,
             due_date=yesterday, project_id=project.id, created_by_id=sample_user.id),
        Task(title="Ściany", status="IN_PROGRESS", estimated_hours=20, actual_hours=5,
             due_date=yesterday, project_id=project.id, created_by_id=sample_user.id),
        Task(title="Dach", status="CANCELLED", due_date=yesterday, project_id=project.id, created_by_id=sample_user.id),
        Task(title="Okna", project_id=project.id, created_by_id=sample_user.id, assigned_to_id=sample_user.id),
    ]
    in_memory_session.add_all(rows)
    await in_memory_session.commit()
    return rows


class TestProjectRepository:
    async def test_search_matches_client_name(self, in_memory_session, project):
        repository = ProjectRepository(in_memory_session)
        assert [p.id for p in await repository.list(filters={"search": "deweloper"})] == [project.id]
        assert await repository.list(filters={"search": "nic"}) == []

    async def test_company_ids_accepts_statement(self, in_memory_session, sample_user, project):
        accessible = CompanyRepository(in_memory_session).accessible_ids_statement(sample_user.id)
        repository = ProjectRepository(in_memory_session)
        assert len(await repository.list(filters={"company_ids": accessible})) == 1
        assert await repository.list(filters={"company_ids": []}) == []

    async def test_count_in_owned_companies(self, in_memory_session, sample_user, project):
        stranger = User(email="stranger@example.com")
        in_memory_session.add(stranger)
        await in_memory_session.commit()
        repository = ProjectRepository(in_memory_session)
        assert await repository.count_in_owned_companies(sample_user.id) == 1
        assert await repository.count_in_owned_companies(stranger.id) == 0

    async def test_task_counts(self, in_memory_session, project, tasks):
        repository = ProjectRepository(in_memory_session)
        assert await repository.task_counts([project.id]) == {project.id: 4}
        assert await repository.task_counts([]) == {}


class TestTaskRepository:
    async def test_filters(self, in_memory_session, sample_user, sample_company, project, tasks):
        repository = TaskRepository(in_memory_session)
        assert len(await repository.list(filters={"company_id": sample_company.id})) == 4
        assert [t.title for t in await repository.list(filters={"status": "DONE"})] == ["Fundamenty"]
        assert [t.title for t in await repository.list(filters={"assigned_to_id": sample_user.id})] == ["Okna"]
        assert [t.title for t in await repository.list(filters={"search": "fundam"})] == ["Fundamenty"]

    async def test_company_ids_hides_other_companies(self, in_memory_session, project, tasks):
        outsider = User(email="outsider@example.com")
        in_memory_session.add(outsider)
        await in_memory_session.commit()
        accessible = CompanyRepository(in_memory_session).accessible_ids_statement(outsider.id)
        assert await TaskRepository(in_memory_session).list(filters={"company_ids": accessible}) == []

    async def test_active_worker_sees_company_tasks(self, in_memory_session, sample_company, project, tasks):
        member = User(email="member@example.com")
        in_memory_session.add(member)
        await in_memory_session.commit()
        in_memory_session.add(Worker(user_id=member.id, company_id=sample_company.id, status="ACTIVE"))
        await in_memory_session.commit()
        accessible = CompanyRepository(in_memory_session).accessible_ids_statement(member.id)
        assert len(await TaskRepository(in_memory_session).list(filters={"company_ids": accessible})) == 4

    async def test_statistics(self, in_memory_session, project, tasks):
        repository = TaskRepository(in_memory_session)
        assert await repository.count_for_project(project.id) == 4
        by_status = await repository.count_by(project.id, Task.status)
        assert by_status == {"DONE": 1, "IN_PROGRESS": 1, "CANCELLED": 1, "TODO": 1}
        by_priority = await repository.count_by(project.id, Task.priority)
        assert by_priority == {"HIGH": 1, "MEDIUM": 3}
        assert await repository.hour_totals(project.id) == {"estimated": 30.0, "actual": 17.0}
        assert await repository.count_overdue(project.id, utc_now()) == 1

    async def test_hour_totals_without_tasks(self, in_memory_session, project):
        assert await TaskRepository(in_memory_session).hour_totals(project.id) == {"estimated": 0.0, "actual": 0.0}
