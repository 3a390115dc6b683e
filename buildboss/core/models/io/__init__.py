"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- common: Pagination and plain acknowledgements
- users: Accounts, authentication and profiles
- companies: Companies, workers and invitations
- projects: Projects, tasks and project statistics
- jobs: Job offers, applications and work requests
- messages: Direct messages and notifications
- subscriptions: Plans, subscriptions, payments and usage
- admin: Plans panel, admin user management and admin messages
"""

from .admin import (
    AdminChangePasswordRequest,
    AdminLoginRequest,
    AdminMessageCreate,
    AdminMessageRead,
    AdminMessageReplyRead,
    AdminRead,
    AdminUserSubscriptionUpdate,
    AdminUserUpdate,
    PlanActiveUpdate,
    PlanChangeRead,
    PlanUpdate,
    ReplyCreate,
    UserSubscriptionUpdate,
)
from .common import MessageResponse, Pagination, offset_for
from .companies import (
    BulkInviteRequest,
    CompanyCreate,
    CompanyListItem,
    CompanyRead,
    CompanyUpdate,
    InviteWorkerRequest,
    WorkerPermissions,
    WorkerRead,
    WorkerUpdate,
)
from .jobs import (
    JobApplicationCreate,
    JobApplicationRead,
    JobApplicationUpdate,
    JobOfferCreate,
    JobOfferRead,
    JobOfferUpdate,
    WorkRequestCreate,
    WorkRequestRead,
    WorkRequestUpdate,
)
from .messages import (
    Conversation,
    ConversationList,
    MessageCreate,
    MessageRead,
    NotificationRead,
    NotificationTestCreate,
    ThreadReadRequest,
)
from .projects import (
    ProjectCreate,
    ProjectRead,
    ProjectStats,
    ProjectUpdate,
    TaskCreate,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from .subscriptions import (
    CancelRequest,
    CheckoutRequest,
    CheckoutSession,
    PaymentRead,
    PlanRead,
    SubscriptionRead,
    UsageStats,
)
from .users import (
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserRead,
    UserSearchResult,
    UserSummary,
    VerifyPasswordRequest,
)

__all__ = [
    "AdminChangePasswordRequest",
    "AdminLoginRequest",
    "AdminMessageCreate",
    "AdminMessageRead",
    "AdminMessageReplyRead",
    "AdminRead",
    "AdminUserSubscriptionUpdate",
    "AdminUserUpdate",
    "BulkInviteRequest",
    "CancelRequest",
    "CheckoutRequest",
    "CheckoutSession",
    "CompanyCreate",
    "CompanyListItem",
    "CompanyRead",
    "CompanyUpdate",
    "Conversation",
    "ConversationList",
    "InviteWorkerRequest",
    "JobApplicationCreate",
    "JobApplicationRead",
    "JobApplicationUpdate",
    "JobOfferCreate",
    "JobOfferRead",
    "JobOfferUpdate",
    "LoginRequest",
    "MessageCreate",
    "MessageRead",
    "MessageResponse",
    "NotificationRead",
    "NotificationTestCreate",
    "Pagination",
    "PaymentRead",
    "PlanActiveUpdate",
    "PlanChangeRead",
    "PlanRead",
    "PlanUpdate",
    "ProfileUpdate",
    "ProjectCreate",
    "ProjectRead",
    "ProjectStats",
    "ProjectUpdate",
    "RegisterRequest",
    "ReplyCreate",
    "SubscriptionRead",
    "TaskCreate",
    "TaskRead",
    "TaskStatusUpdate",
    "TaskUpdate",
    "ThreadReadRequest",
    "UsageStats",
    "UserRead",
    "UserSearchResult",
    "UserSubscriptionUpdate",
    "UserSummary",
    "VerifyPasswordRequest",
    "WorkRequestCreate",
    "WorkRequestRead",
    "WorkRequestUpdate",
    "WorkerPermissions",
    "WorkerRead",
    "WorkerUpdate",
    "offset_for",
]
