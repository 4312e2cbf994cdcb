"""
Queue ranking.

Orders the waiting queue by an effective score that lets waiting time
erode triage severity:

    score = triage_level - hours_waited

Lower score goes first. A triage 3 patient who has waited three hours
(score 0) is ahead of a triage 1 patient who just arrived (score 1).
The order is recomputed on every read and never cached.
"""
from datetime import datetime
from typing import Iterable, List, Optional

from bedflow.models.patient import Patient, as_utc, utcnow

SECONDS_PER_HOUR = 3600.0


def hours_waited(patient: Patient, now: Optional[datetime] = None) -> float:
    """
    Hours since the patient joined the queue.

    0 when the patient has no entry timestamp.
    """
    if patient.joined_at is None:
        return 0.0
    now = as_utc(now) if now is not None else utcnow()
    return (now - as_utc(patient.joined_at)).total_seconds() / SECONDS_PER_HOUR


def score(patient: Patient, now: Optional[datetime] = None) -> float:
    """Effective priority score. Lower is more urgent."""
    return patient.triage_level - hours_waited(patient, now)


def rank_queue(patients: Iterable[Patient], now: Optional[datetime] = None) -> List[Patient]:
    """
    Returns the patients in priority order.

    The sort is stable: equal scores keep queue order, so repeated calls
    with the same input and clock return the same sequence.

    Args:
        patients: Waiting queue in arrival order
        now: Reference time (current UTC time by default)

    Returns:
        New list, most urgent first. Empty input gives an empty list.
    """
    now = as_utc(now) if now is not None else utcnow()
    return sorted(patients, key=lambda patient: score(patient, now))
