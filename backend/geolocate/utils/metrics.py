"""
Prometheus metrics for analyses and provider calls
"""

from prometheus_client import Counter, Histogram

ANALYSIS_COUNT = Counter(
    'geolocation_analyses_total',
    'Geolocation analyses by outcome',
    ['status', 'analysis_type']
)

PROVIDER_CALL_DURATION = Histogram(
    'ai_provider_call_duration_seconds',
    'Structured generation call duration in seconds',
    ['model', 'outcome'],
    buckets=(0.5, 1, 2.5, 5, 10, 20, 40, 80)
)


def record_provider_call(model: str, outcome: str, duration: float) -> None:
    """
    Record one structured generation call

    Args:
        model: Model name
        outcome: success or the error code it was classified as
        duration: Call duration in seconds
    """
    PROVIDER_CALL_DURATION.labels(model=model, outcome=outcome).observe(duration)


def record_analysis_completion(status: str, analysis_type: str) -> None:
    """
    Record analysis completion metric

    Args:
        status: completed or the error code of the failure
        analysis_type: quick, detailed or expert
    """
    ANALYSIS_COUNT.labels(status=status, analysis_type=analysis_type).inc()
