"""
Saltbox HTTP API - Flask Application.

This module implements the Flask application that serves the posts
scaffolding routes, the organization-scoped validation request routes
and the health check.

Architecture:
    Every route follows the same straight-line sequence:
    1. Parse the JSON body (mutating routes only)
    2. Validate it against the route's JSON schema
       (failure -> 400, the handler never runs)
    3. Build a RequestContext (path params, validated body, services)
    4. Call the handler, which calls one or two storage primitives
    5. Shape the JSON response

Routes:
    POST   /posts                     create post (not persisted)   201
    GET    /posts                     list posts (always empty)     200
    GET    /posts/<id>                get post (always null)        200
    PUT    /posts/<id>                update post (not persisted)   200
    DELETE /posts/<id>                delete post                   200
    POST   /api/<org>/req-validate    store validation request      200
    GET    /api/<org>/req-validate    latest validation request     200/404
    DELETE /api/<org>/req-validate    delete matching requests      200/404
    GET    /api/health                health check                  200

Error Handling:
    - 400: {"ok": false, "message": "Invalid input", "errors": [...]}
    - 404: {"ok": false, "message": "Organization not found", "errors": [...]}
    - 500 (validation requests): {"ok": false, "message": "Validation failed", "errors": ["<error text>"]}
    - 500 (posts): {"ok": false, "message": "Failed to <verb> post"}
    - 500 (anything uncaught): {"ok": false, "message": "<error text>"}

CORS:
    Configured from config["cors"]["origins"]; the default "*" permits
    every origin on every route.
"""
import json
import logging
from typing import Any, Callable, Dict, Optional

from flask import Flask, request, jsonify, current_app
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import load_config
from posts import PostService
from schema import ORGANIZATION_SCHEMA, POST_SCHEMA, VALIDATION_REQUEST_SCHEMA, validate_payload
from storage import KeyValueStore, NullKeyValueStore, create_store
from validation_requests import ValidationRequestNotFound, ValidationRequestService

# Logging is configured in saltbox.py main() - this module uses the configured logger
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


class RequestContext:
    """Everything a handler needs for one request.

    Attributes:
        params: Path parameters parsed by the router (e.g. {"org": "acme"})
        body: Validated JSON body reduced to schema fields, or None for
            routes without a body schema
        store: Key-value store collaborator backing validation requests
        posts: PostService (wired to a no-op store)
        validation_requests: ValidationRequestService over store
    """

    def __init__(self, params: Dict[str, Any], body: Optional[Dict[str, Any]],
                 store: KeyValueStore, posts: PostService,
                 validation_requests: ValidationRequestService):
        self.params = params
        self.body = body
        self.store = store
        self.posts = posts
        self.validation_requests = validation_requests


def invalid_input_response(errors: list):
    return jsonify({
        "ok": False,
        "message": "Invalid input",
        "errors": errors
    }), 400


def _log_rejection(kind: str, errors: list) -> None:
    # jsonschema messages embed the rejected value (e.g. a salt), so only
    # the field path and failing keyword are logged
    summary = ", ".join(
        f"{'.'.join(str(p) for p in e['path']) or '<root>'}:{e['code']}" for e in errors
    )
    logger.warning(f"{kind} validation failed for {request.method} {request.url_rule}: {summary}")


def _bind(handler: Callable[[RequestContext], Any], schema: Optional[Dict[str, Any]] = None,
          path_schema: Optional[Dict[str, Any]] = None):
    """Wrap a handler into a Flask view that validates and builds its context.

    Path parameters are checked against path_schema before the body is read,
    so an invalid org never reaches the handler.
    """

    def view(**params):
        if path_schema is not None:
            result = validate_payload(params, path_schema)
            if not result.ok:
                _log_rejection("Path", result.errors)
                return invalid_input_response(result.errors)

        body = None
        if schema is not None:
            result = validate_payload(request.get_json(silent=True), schema)
            if not result.ok:
                _log_rejection("Payload", result.errors)
                return invalid_input_response(result.errors)
            body = result.data

        ctx = RequestContext(
            params=params,
            body=body,
            store=current_app.config["KV_STORE"],
            posts=current_app.config["POST_SERVICE"],
            validation_requests=current_app.config["VALIDATION_REQUEST_SERVICE"],
        )
        return handler(ctx)

    view.__name__ = handler.__name__
    view.__doc__ = handler.__doc__
    return view


# =============================================================================
# Posts (scaffolding: PostService is wired to a NullKeyValueStore)
# =============================================================================

def create_post(ctx: RequestContext):
    """POST /posts - returns the constructed post with 201."""
    try:
        post = ctx.posts.create(ctx.body)
        logger.info(f"Created post: id={post['id']}, title='{post['title']}'")
        return jsonify({"ok": True, "post": post}), 201
    except Exception as e:
        logger.error(f"Failed to create post: {e}", exc_info=True)
        return jsonify({"ok": False, "message": "Failed to create post"}), 500


def list_posts(ctx: RequestContext):
    """GET /posts"""
    try:
        return jsonify({"ok": True, "posts": ctx.posts.list()}), 200
    except Exception as e:
        logger.error(f"Failed to fetch posts: {e}", exc_info=True)
        return jsonify({"ok": False, "message": "Failed to fetch posts"}), 500


def get_post(ctx: RequestContext):
    """GET /posts/<id> - post is null when nothing is stored; never 404."""
    try:
        return jsonify({"ok": True, "post": ctx.posts.get(ctx.params["id"])}), 200
    except Exception as e:
        logger.error(f"Failed to fetch post {ctx.params['id']}: {e}", exc_info=True)
        return jsonify({"ok": False, "message": "Failed to fetch post"}), 500


def update_post(ctx: RequestContext):
    """PUT /posts/<id>"""
    try:
        post = ctx.posts.update(ctx.params["id"], ctx.body)
        return jsonify({"ok": True, "post": post}), 200
    except Exception as e:
        logger.error(f"Failed to update post {ctx.params['id']}: {e}", exc_info=True)
        return jsonify({"ok": False, "message": "Failed to update post"}), 500


def delete_post(ctx: RequestContext):
    """DELETE /posts/<id>"""
    try:
        ctx.posts.delete(ctx.params["id"])
        return jsonify({"ok": True, "message": "Post deleted successfully"}), 200
    except Exception as e:
        logger.error(f"Failed to delete post {ctx.params['id']}: {e}", exc_info=True)
        return jsonify({"ok": False, "message": "Failed to delete post"}), 500


# =============================================================================
# Organization-scoped validation requests
# =============================================================================

def _not_found_response(error: ValidationRequestNotFound):
    return jsonify({
        "ok": False,
        "message": "Organization not found",
        "errors": [str(error)]
    }), 404


def _storage_failure_response(error: Exception):
    return jsonify({
        "ok": False,
        "message": "Validation failed",
        "errors": [str(error) or error.__class__.__name__]
    }), 500


def create_validation_request(ctx: RequestContext):
    """POST /api/<org>/req-validate

    Stores {organization, id, salt, timestamp} and echoes {id, salt}.
    """
    org = ctx.params["org"]
    try:
        record = ctx.validation_requests.create(org, ctx.body["id"], ctx.body["salt"])
    except Exception as e:
        logger.error(f"Failed to store validation request for org={org}: {e}", exc_info=True)
        return _storage_failure_response(e)

    return jsonify({"id": record["id"], "salt": record["salt"]}), 200


def get_latest_validation_request(ctx: RequestContext):
    """GET /api/<org>/req-validate

    Responds with {id, salt} of the most recently captured record.
    """
    org = ctx.params["org"]
    try:
        record = ctx.validation_requests.latest(org)
    except ValidationRequestNotFound as e:
        logger.info(f"Validation request lookup missed: {e}")
        return _not_found_response(e)
    except Exception as e:
        logger.error(f"Failed to read validation requests for org={org}: {e}", exc_info=True)
        return _storage_failure_response(e)

    return jsonify({"id": record["id"], "salt": record["salt"]}), 200


def delete_validation_requests(ctx: RequestContext):
    """DELETE /api/<org>/req-validate

    Deletes every record of (org, id) and echoes {id, salt} from the
    request body, not from the deleted records.
    """
    org = ctx.params["org"]
    try:
        ctx.validation_requests.delete_matching(org, ctx.body["id"])
    except ValidationRequestNotFound as e:
        logger.info(f"Validation request delete missed: {e}")
        return _not_found_response(e)
    except Exception as e:
        logger.error(f"Failed to delete validation requests for org={org}: {e}", exc_info=True)
        return _storage_failure_response(e)

    return jsonify({"id": ctx.body["id"], "salt": ctx.body["salt"]}), 200


def health_check():
    """Health check endpoint for monitoring and load balancers.

    Returns 200 with a fixed status and API_VERSION whatever the state
    of the store or the configuration. No dependency is checked.

    Example:
        $ curl http://localhost:8787/api/health
        {"ok": true, "status": "healthy", "version": "1.0.0"}
    """
    return jsonify({
        "ok": True,
        "status": "healthy",
        "version": API_VERSION
    }), 200


def handle_uncaught_error(error: Exception):
    """Last-resort handler: every error escaping a view ends up here.

    Werkzeug HTTP errors (unknown route, wrong method) keep their status
    code; everything else is logged and becomes a 500.
    """
    if isinstance(error, HTTPException):
        response = error.get_response()
        response.data = json.dumps({
            "ok": False,
            "message": f"{error.code} {error.name}"
        })
        response.content_type = "application/json"
        return response

    logger.error(f"Unhandled error processing {request.method} {request.path}: {error}", exc_info=error)
    return jsonify({
        "ok": False,
        "message": str(error)
    }), 500


def create_app(config: Optional[Dict[str, Any]] = None, store: Optional[KeyValueStore] = None,
               post_store: Optional[KeyValueStore] = None) -> Flask:
    """Factory function to create and configure the Flask application.

    Args:
        config: Optional configuration dictionary (if None, loaded from config.yml)
        store: Optional key-value store for validation requests
            (if None, built from config["storage"])
        post_store: Optional key-value store for posts (defaults to a
            NullKeyValueStore, which keeps posts non-persistent)

    Returns:
        Configured Flask application instance

    Example:
        >>> from storage import InMemoryKeyValueStore
        >>> app = create_app(config={}, store=InMemoryKeyValueStore())
        >>> # Use app with test client or run with Gunicorn
    """
    app = Flask(__name__)

    if config is None:
        config = load_config()

    cors_origins = config.get("cors", {}).get("origins", "*") or "*"
    CORS(app, origins=cors_origins)
    logger.info(f"CORS enabled for origins: {cors_origins}")

    if store is None:
        store = create_store(config)
    if post_store is None:
        post_store = NullKeyValueStore()

    app.config["KV_STORE"] = store
    app.config["POST_SERVICE"] = PostService(post_store)
    app.config["VALIDATION_REQUEST_SERVICE"] = ValidationRequestService(store)

    app.add_url_rule("/posts", view_func=_bind(create_post, POST_SCHEMA), methods=["POST"])
    app.add_url_rule("/posts", view_func=_bind(list_posts), methods=["GET"])
    app.add_url_rule("/posts/<id>", view_func=_bind(get_post), methods=["GET"])
    app.add_url_rule("/posts/<id>", view_func=_bind(update_post, POST_SCHEMA), methods=["PUT"])
    app.add_url_rule("/posts/<id>", view_func=_bind(delete_post), methods=["DELETE"])

    app.add_url_rule(
        "/api/<org>/req-validate",
        view_func=_bind(create_validation_request, VALIDATION_REQUEST_SCHEMA, ORGANIZATION_SCHEMA),
        methods=["POST"],
    )
    app.add_url_rule(
        "/api/<org>/req-validate",
        view_func=_bind(get_latest_validation_request, path_schema=ORGANIZATION_SCHEMA),
        methods=["GET"],
    )
    app.add_url_rule(
        "/api/<org>/req-validate",
        view_func=_bind(delete_validation_requests, VALIDATION_REQUEST_SCHEMA, ORGANIZATION_SCHEMA),
        methods=["DELETE"],
    )

    app.add_url_rule("/api/health", view_func=health_check, methods=["GET"])

    app.register_error_handler(Exception, handle_uncaught_error)

    return app
