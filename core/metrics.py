"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# License metrics
licenses_issued_total = Counter(
    "licenses_issued_total",
    "Total licenses issued",
    ["type"],
)

license_checks_total = Counter(
    "license_checks_total",
    "Total license validity checks",
    ["operation", "result"],
)

license_transitions_total = Counter(
    "license_transitions_total",
    "Total license lifecycle transitions",
    ["transition"],
)

license_update_conflicts_total = Counter(
    "license_update_conflicts_total",
    "Compare-and-swap conflicts on license updates",
)

# Activity metrics
activity_events_total = Counter(
    "activity_events_total",
    "Total activity events recorded",
    ["action"],
)

activity_log_failures_total = Counter(
    "activity_log_failures_total",
    "Activity events that could not be recorded",
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
