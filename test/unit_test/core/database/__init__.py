"""Unit tests for the database layer in buildboss/core/database.

Entities are checked for their column defaults and helpers, repositories
against an in-memory SQLite database or a mocked session.
"""
