"""
Database repository layer using SQLModel.

This package contains the repository classes organized by business domain.
Each module provides async data access operations for its SQLModel entities
on top of the shared BaseRepository interface.

Modules:
- base: BaseRepository interface and QueryBuilder utilities
- users: User account lookups, search and removal
- companies: Companies and company memberships
- projects: Projects and tasks
- jobs: Job offers, job applications and work requests
- messages: Direct messages and notifications
- subscriptions: Plans, subscriptions and payments
- admin: Plans administrators, plan change log and admin messages
"""

from .admin import AdminMessageRepository, PlanChangeRepository, PlansAdminRepository
from .base import BaseRepository, QueryBuilder
from .companies import CompanyRepository, WorkerRepository
from .jobs import JobApplicationRepository, JobOfferRepository, WorkRequestRepository
from .messages import MessageRepository, NotificationRepository
from .projects import ProjectRepository, TaskRepository
from .subscriptions import PaymentRepository, PlanRepository, SubscriptionRepository
from .users import UserRepository

__all__ = [
    "AdminMessageRepository",
    "BaseRepository",
    "CompanyRepository",
    "JobApplicationRepository",
    "JobOfferRepository",
    "MessageRepository",
    "NotificationRepository",
    "PaymentRepository",
    "PlanChangeRepository",
    "PlanRepository",
    "PlansAdminRepository",
    "ProjectRepository",
    "QueryBuilder",
    "SubscriptionRepository",
    "TaskRepository",
    "UserRepository",
    "WorkRequestRepository",
    "WorkerRepository",
]
