"""
Retry/Requeue Scheduler

Maps a call outcome to the lead's next state. Pure: no database access,
the caller applies the plan inside the call-end transaction.

  no_answer (attempts left)   → new, retry+1, eligible again after the cooldown
  no_answer (last attempt)    → not_interested, retry capped, no cooldown
  not_interested              → not_interested
  meeting_scheduled           → meeting_scheduled (+ meeting details)
  completed / call_recorded   → completed

The agent is always released, whatever the outcome; that part lives in
call_lifecycle.end_call.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings

from dialer.exceptions import InvalidTransition
from dialer.models import CallOutcome, CallStatus, LeadStatus


@dataclass(frozen=True)
class RequeuePlan:
    status: str
    retry_count: int
    next_eligible_at: datetime | None
    keeps_meeting_details: bool = False

    @property
    def requeued(self) -> bool:
        return self.status == LeadStatus.NEW


def parse_outcome(raw) -> CallOutcome:
    """Validate an outcome string before anything is written."""
    try:
        return CallOutcome(raw)
    except ValueError:
        raise InvalidTransition(f"Unknown call outcome: {raw!r}")


def plan_requeue(outcome, retry_count: int, now: datetime) -> RequeuePlan:
    max_attempts = settings.MAX_RETRY_ATTEMPTS
    outcome = parse_outcome(outcome)

    if outcome == CallOutcome.NO_ANSWER:
        attempts = min(retry_count + 1, max_attempts)
        if attempts >= max_attempts:
            return RequeuePlan(LeadStatus.NOT_INTERESTED, attempts, None)
        cooldown = timedelta(hours=settings.RETRY_COOLDOWN_HOURS)
        return RequeuePlan(LeadStatus.NEW, attempts, now + cooldown)

    if outcome == CallOutcome.NOT_INTERESTED:
        return RequeuePlan(LeadStatus.NOT_INTERESTED, retry_count, None)

    if outcome == CallOutcome.MEETING_SCHEDULED:
        return RequeuePlan(LeadStatus.MEETING_SCHEDULED, retry_count, None, keeps_meeting_details=True)

    if outcome in (CallOutcome.COMPLETED, CallOutcome.CALL_RECORDED):
        return RequeuePlan(LeadStatus.COMPLETED, retry_count, None)

    raise InvalidTransition(f"No requeue rule for outcome {outcome!r}")


def call_status_for(outcome) -> str:
    """Terminal Call status for an outcome; call_recorded closes as completed."""
    outcome = parse_outcome(outcome)
    if outcome == CallOutcome.CALL_RECORDED:
        return CallStatus.COMPLETED
    return CallStatus(outcome.value)
