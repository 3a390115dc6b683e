"""
BuildBoss.

Back-end service for the BuildBoss construction-company management platform:
companies and their workers, projects, tasks, job offers, work requests,
messaging, notifications, subscription billing and the admin back-office.
"""

__version__ = "1.0.0"
