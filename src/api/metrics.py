import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, REGISTRY


# re-importing the app (tests, reloads) must not register a metric twice
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "planner_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "planner_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

TASKS_SCHEDULED_TOTAL = get_or_create_metric(
    "planner_tasks_scheduled_total", "Tasks that received a slot", Counter
)

TASKS_UNPLACED_TOTAL = get_or_create_metric(
    "planner_tasks_unplaced_total", "Requested tasks left without a slot", Counter
)

SUGGESTIONS_TOTAL = get_or_create_metric(
    "planner_suggestions_total",
    "Classifier suggestions produced",
    Counter,
    labelnames=["kind"],
)


@contextmanager
def observe_request(endpoint: str):
    """Count the request and time it; status is 'error' if the body raises."""
    start = time.perf_counter()
    status = "ok"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.perf_counter() - start)
