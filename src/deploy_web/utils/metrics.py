"""Prometheus metrics shared by the HTTP layer and the deploy pipeline."""

from prometheus_client import Counter, Histogram

# HTTP
REQUEST_COUNT = Counter(
    "deploy_web_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

REQUEST_DURATION = Histogram(
    "deploy_web_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
)

# Activations
ACTIVATION_COUNT = Counter(
    "deploy_web_activations_total",
    "Deploy activations by outcome",
    ["outcome", "error"],
)

CLONE_RESULTS = Counter(
    "deploy_web_clones_total",
    "Repository fetches by result (cloned, reused, failed)",
    ["result"],
)

CLONE_DURATION = Histogram(
    "deploy_web_clone_duration_seconds",
    "Time spent on successful shallow clones",
)
