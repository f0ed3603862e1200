from __future__ import annotations

import re

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.requests import Request


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

submission_lifecycle_total = Counter(
    "submission_lifecycle_total",
    "Submission create/update/delete operations",
    ["action"],
)

submission_status_transitions_total = Counter(
    "submission_status_transitions_total",
    "Review decisions by target status",
    ["status"],
)

user_activation_changes_total = Counter(
    "user_activation_changes_total",
    "Admin toggles of user accounts by resulting state",
    ["state"],
)


UNMATCHED_PATH = "unmatched"
_PATH_PARAM_RE = re.compile(r"\{[^{}]+\}")


def resolve_http_path_label(request: Request) -> str:
    """Route template with every path parameter collapsed to ``{id}``.

    Requests that matched no route share a single label.
    """

    route = request.scope.get("route")
    route_path = getattr(route, "path_format", None) or getattr(route, "path", None)
    if isinstance(route_path, str) and route_path:
        return _PATH_PARAM_RE.sub("{id}", route_path)
    return UNMATCHED_PATH


def observe_http_request(method: str, path: str, status: int, duration: float) -> None:
    http_requests_total.labels(method=method, path=path, status=str(status)).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(duration)


def observe_submission_action(action: str) -> None:
    submission_lifecycle_total.labels(action=action).inc()


def observe_status_transition(status: str) -> None:
    submission_status_transitions_total.labels(status=status).inc()


def observe_user_activation(is_active: bool) -> None:
    user_activation_changes_total.labels(state="active" if is_active else "inactive").inc()


def generate_metrics_payload() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
