"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary

REQUEST_COUNTER = Counter(
	"clubhub_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"clubhub_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

EVENTS_CREATED = Counter("clubhub_events_created_total", "Events created")
EVENTS_UPDATED = Counter("clubhub_events_updated_total", "Events updated")
EVENTS_DELETED = Counter("clubhub_events_deleted_total", "Events deleted by an admin")

FAVORITE_CLEANUP_FAILURES = Counter(
	"clubhub_favorite_cleanup_failures_total",
	"Favourite cleanups that failed after an event was deleted",
)

FAVORITE_CHANGES = Counter(
	"clubhub_favorite_changes_total",
	"Favourite edges added or removed",
	["action"],
)

ADMIN_EDGES = Counter(
	"clubhub_club_admin_edges_total",
	"Club admin edges added or removed",
	["action"],
)

MEMBERSHIP_CHANGES = Counter(
	"clubhub_club_membership_changes_total",
	"Club membership edges added or removed",
	["action"],
)

CLUBS_CREATED = Counter("clubhub_clubs_created_total", "Clubs created")

EXPIRED_EVENTS_PURGED = Counter(
	"clubhub_expired_events_purged_total",
	"Events removed by the expiry sweeper",
)

SEARCH_QUERIES = Counter(
	"clubhub_search_queries_total",
	"Discovery queries executed",
	["kind"],
)

SEARCH_LATENCY = Histogram(
	"clubhub_search_latency_seconds",
	"Discovery query latency in seconds",
	["kind"],
	buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

IDENTITY_REGISTER = Counter("clubhub_identity_register_total", "Accounts registered")
IDENTITY_LOGIN = Counter("clubhub_identity_login_total", "Successful logins", ["method"])
AUTH_REJECTS = Counter("clubhub_auth_rejects_total", "Rejected authentication attempts", ["reason"])

POSTGRES_UP = Gauge("clubhub_postgres_up", "Postgres availability (1=up,0=down)")
POSTGRES_LATENCY = Summary("clubhub_postgres_latency_seconds", "Postgres ping latency (seconds)")

BACKGROUND_RUNS = Counter(
	"clubhub_jobs_runs_total",
	"Background job executions",
	["name", "result"],
)

BACKGROUND_DURATION = Histogram(
	"clubhub_jobs_duration_seconds",
	"Background job duration",
	["name"],
	buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 15.0, 30.0, 60.0),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_event_created() -> None:
	EVENTS_CREATED.inc()


def inc_event_updated() -> None:
	EVENTS_UPDATED.inc()


def inc_event_deleted() -> None:
	EVENTS_DELETED.inc()


def inc_favorite_cleanup_failure() -> None:
	FAVORITE_CLEANUP_FAILURES.inc()


def inc_favorite_change(action: str) -> None:
	FAVORITE_CHANGES.labels(action=action).inc()


def inc_admin_edge(action: str) -> None:
	ADMIN_EDGES.labels(action=action).inc()


def inc_membership_change(action: str) -> None:
	MEMBERSHIP_CHANGES.labels(action=action).inc()


def inc_club_created() -> None:
	CLUBS_CREATED.inc()


def inc_expired_events_purged(count: int) -> None:
	if count > 0:
		EXPIRED_EVENTS_PURGED.inc(count)


def inc_search_query(kind: str) -> None:
	SEARCH_QUERIES.labels(kind=kind).inc()


def observe_search_latency(kind: str, latency_seconds: float) -> None:
	SEARCH_LATENCY.labels(kind=kind).observe(latency_seconds)


def inc_identity_register() -> None:
	IDENTITY_REGISTER.inc()


def inc_identity_login(method: str = "password") -> None:
	IDENTITY_LOGIN.labels(method=method).inc()


def inc_auth_reject(reason: str) -> None:
	AUTH_REJECTS.labels(reason=reason).inc()


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)


def record_job_run(name: str, *, result: str, duration_seconds: float | None = None) -> None:
	BACKGROUND_RUNS.labels(name=name, result=result).inc()
	if duration_seconds is not None:
		BACKGROUND_DURATION.labels(name=name).observe(duration_seconds)
