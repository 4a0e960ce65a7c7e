"""
Call Lifecycle Controller

start_call() opens a Call for the lead an agent holds; end_call() closes it,
appends the lead's call history, applies the requeue plan, bumps the agent's
counters and returns the agent to the pool in one transaction.

Checks run in a fixed order so callers get the most specific error:
  start: NotFound → Forbidden (not your lead) → Conflict (already on a call)
  end:   InvalidTransition (bad outcome, before any write) → NotFound →
         Forbidden (not your call) → AlreadyClosed
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import F

from dialer import store
from dialer.exceptions import AlreadyClosed, Conflict, Forbidden, NotFound
from dialer.models import Agent, Call, CallOutcome, CallStatus, Event, LeadStatus
from dialer.services.requeue import call_status_for, parse_outcome, plan_requeue
from dialer.utils import utcnow

logger = logging.getLogger(__name__)


# ─── Start ────────────────────────────────────────────────────────────────────

def start_call(lead_id, agent_id, now=None) -> Call:
    now = now or utcnow()

    try:
        with transaction.atomic():
            lead = store.get_lead(lead_id, for_update=True)
            agent = store.get_agent(agent_id)

            if lead.assigned_agent_id != agent.id:
                raise Forbidden(f"Lead {lead.id} is not assigned to agent {agent.id}")

            if store.open_call_for_agent(agent.id) is not None:
                raise Conflict(f"Agent {agent.id} already has a call in progress")

            call = Call.objects.create(
                lead=lead,
                agent=agent,
                started_at=now,
                status=CallStatus.IN_PROGRESS,
            )

            lead.status = LeadStatus.CALLING
            lead.last_call_attempt_at = now
            lead.save(update_fields=["status", "last_call_attempt_at", "updated_at"])

            Event.objects.create(
                lead_id=lead.id,
                agent_id=agent.id,
                event_type="call_started",
                source="agent",
                source_id=str(call.id),
                payload={"retry_count": lead.retry_count},
                description=f"{agent.name} started a call",
            )
    except IntegrityError:
        # uniq_call_agent_in_progress caught a duplicate start that slipped past the check
        raise Conflict(f"Agent {agent_id} already has a call in progress")

    logger.info("Call %s started: lead=%s agent=%s", call.id, lead_id, agent_id)
    return call


# ─── End ──────────────────────────────────────────────────────────────────────

def _locate_call(agent_id, call_id) -> Call:
    if call_id:
        return store.get_call(call_id)
    call = store.open_call_for_agent(agent_id)
    if call is None:
        raise NotFound(f"Agent {agent_id} has no call in progress")
    return call


def _stat_updates(outcome: CallOutcome, now) -> dict:
    updates = {
        "total_calls": F("total_calls") + 1,
        "last_activity_at": now,
    }
    if outcome in (CallOutcome.MEETING_SCHEDULED, CallOutcome.CALL_RECORDED):
        updates["successful_calls"] = F("successful_calls") + 1
    if outcome == CallOutcome.MEETING_SCHEDULED:
        updates["meetings_scheduled"] = F("meetings_scheduled") + 1
    return updates


def end_call(
    agent_id,
    outcome,
    notes: str = "",
    call_id=None,
    meeting_details: dict | None = None,
    recording_url: str | None = None,
    quality_rating: str | None = None,
    now=None,
) -> Call:
    """
    Close the agent's call with an outcome and settle the lead and the agent.

    call_id may be omitted, in which case the agent's single in-progress
    call is used. Ending the same call twice raises AlreadyClosed and leaves
    the agent's counters untouched.
    """
    outcome = parse_outcome(outcome)
    now = now or utcnow()

    agent = store.get_agent(agent_id)
    call = _locate_call(agent.id, call_id)
    if call.agent_id != agent.id:
        raise Forbidden(f"Call {call.id} belongs to another agent")
    if not call.is_open:
        raise AlreadyClosed(f"Call {call.id} is already closed ({call.status})")

    with transaction.atomic():
        lead = store.get_lead(call.lead_id, for_update=True)
        plan = plan_requeue(outcome, lead.retry_count, now)

        duration = max(int((now - call.started_at).total_seconds()), 0)
        closed = store.close_call(
            call.id,
            status=call_status_for(outcome),
            ended_at=now,
            duration_seconds=duration,
            notes=notes or "",
            recording_url=recording_url or None,
            quality_rating=quality_rating or None,
            meeting_details=meeting_details or None,
        )
        if not closed:
            raise AlreadyClosed(f"Call {call.id} is already closed")

        store.append_to_history(
            lead,
            agent_id=agent.id,
            call_id=call.id,
            result=outcome,
            notes=notes,
            recording_url=recording_url,
            recorded_at=now,
        )

        old_status = lead.status
        lead.status = plan.status
        lead.retry_count = plan.retry_count
        lead.next_eligible_at = plan.next_eligible_at
        lead.assigned_agent = None
        update_fields = ["status", "retry_count", "next_eligible_at", "assigned_agent", "updated_at"]
        if plan.keeps_meeting_details and meeting_details:
            lead.meeting_details = meeting_details
            update_fields.append("meeting_details")
        lead.save(update_fields=update_fields)

        Agent.objects.filter(id=agent.id).update(**_stat_updates(outcome, now))
        if not store.release_agent(agent.id, lead.id):
            logger.warning(
                "Agent %s did not hold lead %s when call %s ended; counters updated, pool unchanged",
                agent.id, lead.id, call.id,
            )

        Event.objects.create(
            lead_id=lead.id,
            agent_id=agent.id,
            event_type="call_ended",
            source="agent",
            source_id=str(call.id),
            payload={
                "outcome": outcome.value,
                "duration_seconds": duration,
                "old_status": old_status,
                "new_status": plan.status,
                "retry_count": plan.retry_count,
            },
            description=f"Call ended: {outcome.label} ({duration}s)",
        )
        if plan.requeued:
            Event.objects.create(
                lead_id=lead.id,
                event_type="lead_requeued",
                source="system",
                source_id=str(call.id),
                payload={
                    "retry_count": plan.retry_count,
                    "next_eligible_at": plan.next_eligible_at.isoformat(),
                },
                description=f"Requeued after no answer (attempt {plan.retry_count})",
            )

    call.refresh_from_db()
    logger.info(
        "Call %s ended: outcome=%s lead=%s %s -> %s (retry=%d)",
        call.id, outcome.value, lead.id, old_status, plan.status, plan.retry_count,
    )
    return call


# ─── Reads ────────────────────────────────────────────────────────────────────

def get_active_call(agent_id) -> Call | None:
    agent = store.get_agent(agent_id)
    return store.open_call_for_agent(agent.id)
