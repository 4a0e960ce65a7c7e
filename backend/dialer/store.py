"""
Entity Store — the only place that knows how leads, agents and calls are persisted.

Lookups raise NotFound instead of returning None. Claims and releases are
compare-and-swap UPDATEs: the WHERE clause restates the precondition, and a
return value of False means another request got there first. Callers wrap
multi-entity changes in transaction.atomic(), which is the compound-update
primitive; nothing here caches state between calls.
"""
import logging

from django.core.exceptions import ValidationError
from django.db.models import F, Max, Q

from dialer.exceptions import NotFound
from dialer.models import Agent, Call, CallHistoryEntry, CallStatus, Lead, LeadStatus

logger = logging.getLogger(__name__)


# ─── Lookups ──────────────────────────────────────────────────────────────────

def _get(model, label: str, pk, for_update: bool):
    queryset = model.objects.select_for_update() if for_update else model.objects.all()
    try:
        return queryset.get(id=pk)
    except (model.DoesNotExist, ValidationError):
        raise NotFound(f"{label} {pk} not found")


def get_lead(lead_id, for_update: bool = False) -> Lead:
    return _get(Lead, "Lead", lead_id, for_update)


def get_agent(agent_id, for_update: bool = False) -> Agent:
    return _get(Agent, "Agent", agent_id, for_update)


def get_call(call_id, for_update: bool = False) -> Call:
    return _get(Call, "Call", call_id, for_update)


def eligible_leads(now):
    """
    Leads waiting in the queue right now, oldest first.
    A lead is eligible when it is new, unheld, and past any cooldown.
    """
    return (
        Lead.objects
        .filter(status=LeadStatus.NEW, assigned_agent__isnull=True)
        .filter(Q(next_eligible_at__isnull=True) | Q(next_eligible_at__lte=now))
        .order_by("created_at", "id")
    )


def find_idle_agents():
    """Active, unoccupied agents. Least recently active first, then by id."""
    return (
        Agent.objects
        .filter(is_active=True, is_available=True, current_lead__isnull=True)
        .order_by(F("last_activity_at").asc(nulls_first=True), "id")
    )


def open_call_for_agent(agent_id) -> Call | None:
    return Call.objects.filter(agent_id=agent_id, status=CallStatus.IN_PROGRESS).first()


# ─── Compare-and-swap claims ──────────────────────────────────────────────────

def claim_agent(agent_id, lead_id) -> bool:
    """Mark an idle agent as holding lead_id. False if it was no longer idle."""
    updated = (
        Agent.objects
        .filter(id=agent_id, is_active=True, is_available=True, current_lead__isnull=True)
        .update(is_available=False, current_lead_id=lead_id)
    )
    return updated == 1


def claim_lead(lead_id, agent_id, now) -> bool:
    """Mark a queued lead as assigned to agent_id. False if it was no longer queued."""
    # .update() skips auto_now, so updated_at is stamped explicitly
    updated = (
        Lead.objects
        .filter(id=lead_id, status=LeadStatus.NEW, assigned_agent__isnull=True)
        .update(
            status=LeadStatus.ASSIGNED,
            assigned_agent_id=agent_id,
            last_call_attempt_at=now,
            next_eligible_at=None,
            updated_at=now,
        )
    )
    return updated == 1


def release_agent(agent_id, lead_id) -> bool:
    """Return an agent to the pool, but only if it still holds lead_id."""
    updated = (
        Agent.objects
        .filter(id=agent_id, current_lead_id=lead_id)
        .update(is_available=True, current_lead=None)
    )
    return updated == 1


def close_call(call_id, **fields) -> bool:
    """One-shot transition out of in_progress. False if the call was already closed."""
    updated = (
        Call.objects
        .filter(id=call_id, status=CallStatus.IN_PROGRESS)
        .update(**fields)
    )
    return updated == 1


# ─── Call history ─────────────────────────────────────────────────────────────

def append_to_history(lead: Lead, *, agent_id, call_id, result: str, notes: str,
                      recording_url: str | None, recorded_at) -> CallHistoryEntry:
    """
    Append one entry to a lead's call history.
    The caller must hold the lead row lock so sequence numbers stay gapless.
    """
    last = lead.call_history.aggregate(last=Max("sequence"))["last"] or 0
    return CallHistoryEntry.objects.create(
        lead=lead,
        agent_id=agent_id,
        call_id=call_id,
        sequence=last + 1,
        result=result,
        notes=notes or "",
        recording_url=recording_url or None,
        recorded_at=recorded_at,
    )
