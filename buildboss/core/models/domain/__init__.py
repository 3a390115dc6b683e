"""Domain enums for BuildBoss records."""

from .enums import (
    AdminMessagePriority,
    AdminMessageStatus,
    ApplicationStatus,
    EmploymentType,
    ExperienceLevel,
    NotificationType,
    PaymentStatus,
    PlanChangeType,
    Priority,
    ProjectStatus,
    ResourceType,
    SenderType,
    SubscriptionStatus,
    TaskStatus,
    UserRole,
    WorkerStatus,
    WorkRequestType,
)

__all__ = [
    "AdminMessagePriority",
    "AdminMessageStatus",
    "ApplicationStatus",
    "EmploymentType",
    "ExperienceLevel",
    "NotificationType",
    "PaymentStatus",
    "PlanChangeType",
    "Priority",
    "ProjectStatus",
    "ResourceType",
    "SenderType",
    "SubscriptionStatus",
    "TaskStatus",
    "UserRole",
    "WorkerStatus",
    "WorkRequestType",
]
