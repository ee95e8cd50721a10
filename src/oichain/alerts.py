"""Threshold alerts from consecutive metrics snapshots.

Every rule is evaluated independently, so one comparison can fire
several alerts. The caller owns the alert list and the baseline; this
module keeps no history.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from oichain.formatting import format_currency
from oichain.metrics import MetricsSnapshot

PCR_CHANGE_THRESHOLD = 0.1
MAX_PAIN_SHIFT_THRESHOLD = 100.0
DOMINANCE_SHIFT_THRESHOLD = 5.0
PCR_WARNING_HIGH = 1.2
PCR_WARNING_LOW = 0.8
PCR_EXTREME_HIGH = 1.5
PCR_EXTREME_LOW = 0.6

# Deltas are rounded before comparison so that 1.1 - 1.0 is not > 0.1.
_DELTA_PRECISION = 9


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"


class AlertKind(str, Enum):
    PCR_CHANGE = "pcr_change"
    MAX_PAIN_SHIFT = "max_pain_shift"
    DOMINANCE_SHIFT = "dominance_shift"
    EXTREME_PCR = "extreme_pcr"


@dataclass(frozen=True)
class Alert:
    """A fired notification.

    Attributes:
        kind: Which rule fired.
        severity: info or warning.
        title: Short heading.
        message: Human-readable description.
        previous: Display value before the change ("" if not applicable).
        current: Display value after the change.
        id: Unique identifier.
        created_at: When the alert was raised.
    """

    kind: AlertKind
    severity: Severity
    title: str
    message: str
    previous: str
    current: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def value(self) -> str:
        """One-line before/after display."""
        if self.previous:
            return f"{self.previous} → {self.current}"
        return self.current

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "previous": self.previous,
            "current": self.current,
            "value": self.value,
            "created_at": self.created_at.isoformat(),
        }


def _pcr_change(current: MetricsSnapshot, previous: MetricsSnapshot) -> Alert | None:
    delta = round(current.pcr - previous.pcr, _DELTA_PRECISION)
    if abs(delta) <= PCR_CHANGE_THRESHOLD:
        return None

    direction = "increased" if delta > 0 else "decreased"
    if current.pcr > PCR_WARNING_HIGH or current.pcr < PCR_WARNING_LOW:
        severity = Severity.WARNING
    else:
        severity = Severity.INFO
    return Alert(
        kind=AlertKind.PCR_CHANGE,
        severity=severity,
        title="PCR Change",
        message=f"PCR {direction} by {abs(delta):.3f}",
        previous=f"{previous.pcr:.3f}",
        current=f"{current.pcr:.3f}",
    )


def _max_pain_shift(current: MetricsSnapshot, previous: MetricsSnapshot) -> Alert | None:
    delta = round(current.max_pain - previous.max_pain, _DELTA_PRECISION)
    if abs(delta) <= MAX_PAIN_SHIFT_THRESHOLD:
        return None

    direction = "up" if delta > 0 else "down"
    return Alert(
        kind=AlertKind.MAX_PAIN_SHIFT,
        severity=Severity.WARNING,
        title="Max Pain Shift",
        message=f"Max pain moved {direction} by {abs(delta):,.0f} points",
        previous=format_currency(previous.max_pain),
        current=format_currency(current.max_pain),
    )


def _dominance_shift(current: MetricsSnapshot, previous: MetricsSnapshot) -> Alert | None:
    delta = round(current.call_dominance - previous.call_dominance, _DELTA_PRECISION)
    if abs(delta) <= DOMINANCE_SHIFT_THRESHOLD:
        return None

    side = "Call (CE)" if delta > 0 else "Put (PE)"
    return Alert(
        kind=AlertKind.DOMINANCE_SHIFT,
        severity=Severity.INFO,
        title="Dominance Shift",
        message=f"{side} side gained {abs(delta):.1f} points of OI dominance",
        previous=f"CE {previous.call_dominance:.1f}% / PE {previous.put_dominance:.1f}%",
        current=f"CE {current.call_dominance:.1f}% / PE {current.put_dominance:.1f}%",
    )


def _extreme_pcr(current: MetricsSnapshot) -> Alert | None:
    # A zero PCR with no call OI is the "undefined" sentinel, not an extreme.
    if not current.pcr_defined:
        return None
    if current.pcr >= PCR_EXTREME_HIGH:
        level = "extremely high (heavy put writing)"
    elif current.pcr <= PCR_EXTREME_LOW:
        level = "extremely low (heavy call writing)"
    else:
        return None
    return Alert(
        kind=AlertKind.EXTREME_PCR,
        severity=Severity.WARNING,
        title="Extreme PCR",
        message=f"PCR is {level}",
        previous="",
        current=f"{current.pcr:.3f}",
    )


def diff_metrics(
    current: MetricsSnapshot,
    previous: MetricsSnapshot | None,
    alerts: list[Alert] | None = None,
) -> list[Alert]:
    """Compare two metrics snapshots and append any fired alerts.

    With no previous snapshot nothing fires; the current snapshot simply
    becomes the caller's new baseline.

    Args:
        current: Latest metrics.
        previous: Baseline metrics, or None on the first cycle.
        alerts: Caller-owned list to append to. A new list is used when
            omitted.

    Returns:
        The list the alerts were appended to.
    """
    if alerts is None:
        alerts = []
    if previous is None:
        return alerts

    for alert in (
        _pcr_change(current, previous),
        _max_pain_shift(current, previous),
        _dominance_shift(current, previous),
        _extreme_pcr(current),
    ):
        if alert is not None:
            alerts.append(alert)
    return alerts
