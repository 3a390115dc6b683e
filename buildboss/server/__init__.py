"""
BuildBoss Server Package.

This package contains the web server implementation for the BuildBoss platform.
It includes the API definition, core configuration, services and cross-cutting
HTTP concerns.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Settings and constants.
    exception_handlers: Mapping of errors to JSON responses.
    middleware: Request tracing middleware.
    services: Business logic shared by the routers.
"""
