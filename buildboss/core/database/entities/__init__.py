"""
Database entity models.

This package contains all database entity models organized by business domain
and table relationships.

Modules:
- users: Platform user accounts
- companies: Companies and their workers
- projects: Projects and tasks
- jobs: Job offers and applications
- work_requests: Public work requests
- messages: Direct messages and notifications
- subscriptions: Plans, subscriptions and payments
- admin: Plans administrators, plan audit log and admin messages
"""

from . import (
    admin,
    companies,
    jobs,
    messages,
    projects,
    subscriptions,
    users,
    work_requests,
)
from .admin import AdminMessage, AdminMessageReply, PlanChange, PlansAdmin
from .companies import Company, Worker
from .jobs import JobApplication, JobOffer
from .messages import Message, Notification
from .projects import Project, Task
from .subscriptions import Payment, Subscription, SubscriptionPlan
from .users import User
from .work_requests import WorkRequest

__all__ = [
    "admin",
    "companies",
    "jobs",
    "messages",
    "projects",
    "subscriptions",
    "users",
    "work_requests",
    "AdminMessage",
    "AdminMessageReply",
    "Company",
    "JobApplication",
    "JobOffer",
    "Message",
    "Notification",
    "Payment",
    "PlanChange",
    "PlansAdmin",
    "Project",
    "Subscription",
    "SubscriptionPlan",
    "Task",
    "User",
    "Worker",
    "WorkRequest",
]
