"""Domain enums shared by entities, I/O models and services."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Platform-wide role of a user account."""

    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    BOSS = "BOSS"
    WORKER = "WORKER"


class WorkerStatus(str, Enum):
    """
    Membership state of a user in a company.

    ``INVITED`` rows become ``ACTIVE`` when the invitation is accepted and
    ``LEFT`` when it is rejected or the worker leaves.
    """

    INVITED = "INVITED"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    LEFT = "LEFT"


class ProjectStatus(str, Enum):
    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class Priority(str, Enum):
    """Priority shared by projects and tasks."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    FREELANCE = "FREELANCE"
    INTERNSHIP = "INTERNSHIP"


class ExperienceLevel(str, Enum):
    JUNIOR = "JUNIOR"
    MID = "MID"
    SENIOR = "SENIOR"
    EXPERT = "EXPERT"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class WorkRequestType(str, Enum):
    ONE_TIME = "ONE_TIME"
    RECURRING = "RECURRING"
    PROJECT = "PROJECT"


class NotificationType(str, Enum):
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_COMPLETED = "TASK_COMPLETED"
    COMPANY_INVITATION = "COMPANY_INVITATION"
    MESSAGE_RECEIVED = "MESSAGE_RECEIVED"
    JOB_APPLICATION = "JOB_APPLICATION"
    APPLICATION_STATUS = "APPLICATION_STATUS"
    ADMIN_MESSAGE = "ADMIN_MESSAGE"
    ADMIN_MESSAGE_REPLY = "ADMIN_MESSAGE_REPLY"
    SUBSCRIPTION_TRIAL_ENDING = "SUBSCRIPTION_TRIAL_ENDING"
    SUBSCRIPTION_EXPIRED = "SUBSCRIPTION_EXPIRED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    SYSTEM = "SYSTEM"


class SubscriptionStatus(str, Enum):
    """
    Lifecycle of a subscription, mirrored from Stripe.

    Only ``ACTIVE`` and a ``TRIAL`` whose end date lies in the future grant
    access to plan features.
    """

    ACTIVE = "ACTIVE"
    TRIAL = "TRIAL"
    PAST_DUE = "PAST_DUE"
    CANCELED = "CANCELED"
    UNPAID = "UNPAID"
    INCOMPLETE = "INCOMPLETE"
    INCOMPLETE_EXPIRED = "INCOMPLETE_EXPIRED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PlanChangeType(str, Enum):
    """Kinds of entries in the plan audit log."""

    INITIALIZED = "initialized"
    UPDATED = "updated"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    ADMIN_USER_CREATED = "admin_user_created"
    ADMIN_USER_UPDATE = "admin_user_update"


class AdminMessagePriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"


class AdminMessageStatus(str, Enum):
    UNREAD = "UNREAD"
    READ = "READ"
    SENT = "SENT"
    ARCHIVED = "ARCHIVED"


class SenderType(str, Enum):
    """Author side of an admin message or reply."""

    ADMIN = "ADMIN"
    USER = "USER"


class ResourceType(str, Enum):
    """Plan-limited resources checked before creation."""

    COMPANIES = "companies"
    PROJECTS = "projects"
    WORKERS = "workers"
    JOB_OFFERS = "jobOffers"
    WORK_REQUESTS = "workRequests"
