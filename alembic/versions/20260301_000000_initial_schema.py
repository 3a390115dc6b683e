"""Initial schema for BuildBoss

Revision ID: 20260301_000000
Revises: None
Create Date: 2026-03-01 00:00:00.000000

Creates every table of the BuildBoss server:
- Accounts (users) and tenants (companies, workers)
- Work management (projects, tasks)
- Marketplace (job offers, job applications, work requests)
- Communication (messages, notifications)
- Billing (subscription plans, subscriptions, payments)
- Back office (plans administrators, plan change log, admin messages and replies)

The plan catalogue is not seeded here; it is created through
``POST /plans-admin/initialize-plans`` or ``buildboss init-plans`` so that the
change log records it.

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id(name: str = "id", **kwargs) -> sa.Column:
    return sa.Column(name, sa.String(32), nullable=kwargs.pop("nullable", False), **kwargs)


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(50), nullable=True),
        sa.Column("last_name", sa.String(50), nullable=True),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("is_email_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("confirmation_token", sa.String(64), nullable=True),
        sa.Column("google_id", sa.String(64), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("google_id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_confirmation_token", "users", ["confirmation_token"])
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "companies",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("nip", sa.String(20), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("logo", sa.String(500), nullable=True),
        _id("created_by_id"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("nip"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"]),
    )
    op.create_index("ix_companies_name", "companies", ["name"])
    op.create_index("ix_companies_created_by_id", "companies", ["created_by_id"])

    op.create_table(
        "workers",
        _id(),
        _id("user_id"),
        _id("company_id"),
        sa.Column("position", sa.String(100), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("can_view", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_edit", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_manage_finance", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("invited_at", sa.DateTime(), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "company_id", name="uq_workers_user_company"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
    )
    op.create_index("ix_workers_user_id", "workers", ["user_id"])
    op.create_index("ix_workers_company_id", "workers", ["company_id"])
    op.create_index("ix_workers_status", "workers", ["status"])

    op.create_table(
        "projects",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("deadline", sa.DateTime(), nullable=True),
        sa.Column("budget", sa.Float(), nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("client_name", sa.String(100), nullable=True),
        sa.Column("client_email", sa.String(255), nullable=True),
        sa.Column("client_phone", sa.String(32), nullable=True),
        _id("company_id"),
        _id("created_by_id"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"]),
    )
    for column in ("name", "status", "priority", "company_id", "created_by_id", "created_at"):
        op.create_index(f"ix_projects_{column}", "projects", [column])

    op.create_table(
        "tasks",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("estimated_hours", sa.Float(), nullable=True),
        sa.Column("actual_hours", sa.Float(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        _id("project_id"),
        _id("assigned_to_id", nullable=True),
        _id("created_by_id"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["assigned_to_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"]),
    )
    for column in ("status", "priority", "due_date", "project_id", "assigned_to_id", "created_by_id", "created_at"):
        op.create_index(f"ix_tasks_{column}", "tasks", [column])

    op.create_table(
        "job_offers",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("employment_type", sa.String(16), nullable=False),
        sa.Column("experience_level", sa.String(16), nullable=False),
        sa.Column("country", sa.String(64), nullable=False),
        sa.Column("voivodeship", sa.String(32), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("salary_min", sa.Float(), nullable=True),
        sa.Column("salary_max", sa.Float(), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("benefits", sa.Text(), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        _id("company_id"),
        _id("created_by_id"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"]),
    )
    for column in ("category", "voivodeship", "city", "is_active", "company_id", "created_by_id", "created_at"):
        op.create_index(f"ix_job_offers_{column}", "job_offers", [column])

    op.create_table(
        "job_applications",
        _id(),
        _id("job_offer_id"),
        _id("applicant_id"),
        sa.Column("cover_letter", sa.Text(), nullable=True),
        sa.Column("cv_url", sa.String(500), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("applied_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("job_offer_id", "applicant_id", name="uq_job_applications_offer_applicant"),
        sa.ForeignKeyConstraint(["job_offer_id"], ["job_offers.id"]),
        sa.ForeignKeyConstraint(["applicant_id"], ["users.id"]),
    )
    for column in ("job_offer_id", "applicant_id", "status", "applied_at"):
        op.create_index(f"ix_job_applications_{column}", "job_applications", [column])

    op.create_table(
        "work_requests",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("voivodeship", sa.String(32), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("budget_min", sa.Float(), nullable=True),
        sa.Column("budget_max", sa.Float(), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("deadline", sa.DateTime(), nullable=True),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("materials", sa.Text(), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        _id("company_id", nullable=True),
        _id("created_by_id"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"]),
    )
    for column in ("category", "voivodeship", "city", "is_active", "company_id", "created_by_id", "created_at"):
        op.create_index(f"ix_work_requests_{column}", "work_requests", [column])

    op.create_table(
        "messages",
        _id(),
        sa.Column("subject", sa.String(200), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _id("sender_id"),
        _id("receiver_id"),
        _id("job_offer_id", nullable=True),
        _id("work_request_id", nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["receiver_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["job_offer_id"], ["job_offers.id"]),
        sa.ForeignKeyConstraint(["work_request_id"], ["work_requests.id"]),
    )
    for column in ("is_read", "sender_id", "receiver_id", "job_offer_id", "work_request_id", "created_at"):
        op.create_index(f"ix_messages_{column}", "messages", [column])

    op.create_table(
        "notifications",
        _id(),
        _id("user_id"),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    for column in ("user_id", "type", "is_read", "created_at"):
        op.create_index(f"ix_notifications_{column}", "notifications", [column])

    op.create_table(
        "subscription_plans",
        _id(),
        sa.Column("name", sa.String(32), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("stripe_price_id", sa.String(64), nullable=True),
        sa.Column("max_companies", sa.Integer(), nullable=False),
        sa.Column("max_projects", sa.Integer(), nullable=False),
        sa.Column("max_workers", sa.Integer(), nullable=False),
        sa.Column("max_job_offers", sa.Integer(), nullable=False),
        sa.Column("max_work_requests", sa.Integer(), nullable=False),
        sa.Column("max_storage_gb", sa.Float(), nullable=False),
        sa.Column("has_advanced_reports", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("has_api_access", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("has_priority_support", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("has_custom_branding", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("has_team_management", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_subscription_plans_name", "subscription_plans", ["name"], unique=True)
    op.create_index("ix_subscription_plans_is_active", "subscription_plans", ["is_active"])

    op.create_table(
        "subscriptions",
        _id(),
        _id("user_id"),
        _id("plan_id"),
        sa.Column("status", sa.String(24), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("trial_end_date", sa.DateTime(), nullable=True),
        sa.Column("next_billing_date", sa.DateTime(), nullable=True),
        sa.Column("stripe_customer_id", sa.String(64), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(64), nullable=True),
        sa.Column("stripe_price_id", sa.String(64), nullable=True),
        sa.Column("cancel_at_period_end", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("canceled_at", sa.DateTime(), nullable=True),
        sa.Column("cancel_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("stripe_subscription_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["plan_id"], ["subscription_plans.id"]),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"], unique=True)
    for column in ("plan_id", "status", "stripe_customer_id"):
        op.create_index(f"ix_subscriptions_{column}", "subscriptions", [column])

    op.create_table(
        "payments",
        _id(),
        _id("subscription_id"),
        sa.Column("amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("stripe_invoice_id", sa.String(64), nullable=True),
        sa.Column("stripe_payment_intent_id", sa.String(64), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["subscription_id"], ["subscriptions.id"]),
    )
    for column in ("subscription_id", "status", "stripe_invoice_id", "created_at"):
        op.create_index(f"ix_payments_{column}", "payments", [column])

    op.create_table(
        "plans_admins",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=True),
        sa.Column("last_name", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("password_changed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_plans_admins_email", "plans_admins", ["email"], unique=True)

    op.create_table(
        "plan_changes",
        _id(),
        _id("plan_id", nullable=True),
        sa.Column("plan_name", sa.String(100), nullable=False),
        sa.Column("change_type", sa.String(32), nullable=False),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        _id("admin_id", nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["admin_id"], ["plans_admins.id"]),
    )
    for column in ("plan_id", "change_type", "created_at"):
        op.create_index(f"ix_plan_changes_{column}", "plan_changes", [column])

    op.create_table(
        "admin_messages",
        _id(),
        sa.Column("subject", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(8), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("sender_type", sa.String(8), nullable=False),
        _id("sender_admin_id", nullable=True),
        _id("recipient_id"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sender_admin_id"], ["plans_admins.id"]),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"]),
    )
    for column in ("priority", "status", "recipient_id", "created_at"):
        op.create_index(f"ix_admin_messages_{column}", "admin_messages", [column])

    op.create_table(
        "admin_message_replies",
        _id(),
        _id("message_id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("sender_type", sa.String(8), nullable=False),
        _id("sender_admin_id", nullable=True),
        _id("sender_user_id", nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["message_id"], ["admin_messages.id"]),
        sa.ForeignKeyConstraint(["sender_admin_id"], ["plans_admins.id"]),
        sa.ForeignKeyConstraint(["sender_user_id"], ["users.id"]),
    )
    op.create_index("ix_admin_message_replies_message_id", "admin_message_replies", ["message_id"])
    op.create_index("ix_admin_message_replies_created_at", "admin_message_replies", ["created_at"])


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("admin_message_replies")
    op.drop_table("admin_messages")
    op.drop_table("plan_changes")
    op.drop_table("plans_admins")
    op.drop_table("payments")
    op.drop_table("subscriptions")
    op.drop_table("subscription_plans")
    op.drop_table("notifications")
    op.drop_table("messages")
    op.drop_table("work_requests")
    op.drop_table("job_applications")
    op.drop_table("job_offers")
    op.drop_table("tasks")
    op.drop_table("projects")
    op.drop_table("workers")
    op.drop_table("companies")
    op.drop_table("users")
