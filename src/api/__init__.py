"""Saltbox HTTP API Package.

This package provides the Flask application serving the posts
scaffolding routes, the organization-scoped validation request routes
and the health check.

Key Components:
    create_app: Application factory (config, key-value store injection)
    RequestContext: Per-request bundle handed to every route handler

Usage:
    Start the API server:
        $ poetry run saltbox

    Or use Flask directly:
        $ FLASK_APP="api.app:create_app()" flask run

    Store and read back a validation request:
        $ curl -X POST http://localhost:8787/api/acme/req-validate \
               -H "Content-Type: application/json" \
               -d '{"id": "user-1", "salt": "s3cr3t-salt"}'
        $ curl http://localhost:8787/api/acme/req-validate
"""
from .app import create_app, RequestContext

__all__ = ["create_app", "RequestContext"]
