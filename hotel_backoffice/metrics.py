"""
Prometheus metrics for reservation lifecycle, availability and reporting.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., status transitions)
    - Histogram: Observations bucketed by value (e.g., statistics computation time)
    - Gauge: Point-in-time value that can go up or down (e.g., occupancy rate)

Example:
    >>> from hotel_backoffice.metrics import status_transitions
    >>> status_transitions.labels(
    ...     from_status="Pending", to_status="Confirmed_Pending_Payment", outcome="applied"
    ... ).inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# =============================================================================
# Lifecycle Metrics
# =============================================================================

status_transitions = Counter(
    "hotel_status_transitions_total",
    "Reservation status change attempts",
    ["from_status", "to_status", "outcome"],
)
"""
Counter for status change attempts.

Labels:
    from_status: Status before the change
    to_status: Requested status
    outcome: applied, rejected (not allowed) or stale (changed concurrently)
"""

reservations_created = Counter(
    "hotel_reservations_created_total",
    "Reservations created",
    ["origin", "status"],
)
"""
Counter for new reservations.

Labels:
    origin: staff_manual or mobile
    status: Initial status
"""

reservations_expired = Counter(
    "hotel_reservations_expired_total",
    "Pending reservations expired after the payment window lapsed",
)

# =============================================================================
# Availability Metrics
# =============================================================================

availability_checks = Counter(
    "hotel_availability_checks_total",
    "Room availability checks",
    ["result"],
)
"""
Counter for availability checks.

Labels:
    result: available or unavailable
"""

# =============================================================================
# Reporting Metrics
# =============================================================================

statistics_duration = Histogram(
    "hotel_statistics_duration_seconds",
    "Time spent loading and aggregating dashboard statistics",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, float("inf")),
)

occupancy_rate = Gauge(
    "hotel_occupancy_rate_percent",
    "Occupancy rate of the current month as last computed for the dashboard",
)
