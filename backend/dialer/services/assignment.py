"""
Assignment Engine

Pairs one queued lead with one idle agent. Both halves of the pairing are
compare-and-swap UPDATEs inside a single transaction: if either claim
matches zero rows, the block raises and rolls back, so a lead marked
assigned without its agent (or the reverse) is never visible.

Rows are locked lead first, then agent. start_call and end_call lock the
lead row too, so requests touching the same pair queue up on PostgreSQL
instead of deadlocking.
"""
import logging

from django.db import IntegrityError, transaction

from dialer import store
from dialer.exceptions import AgentUnavailable, LeadUnavailable
from dialer.models import Agent, Event, Lead, LeadStatus
from dialer.utils import utcnow

logger = logging.getLogger(__name__)


def find_idle_agent() -> Agent | None:
    """The least recently active agent who is free to take a lead, if any."""
    return store.find_idle_agents().first()


def assign_lead_to_agent(lead_id, agent_id, now=None, source: str = "system") -> tuple[Lead, Agent]:
    """
    Atomically hand lead_id to agent_id.

    Raises NotFound if either is missing, AgentUnavailable if the agent is
    inactive or already holding a lead, LeadUnavailable if the lead is not
    queued. Returns the refreshed (lead, agent) pair.
    """
    now = now or utcnow()

    with transaction.atomic():
        lead = store.get_lead(lead_id, for_update=True)
        agent = store.get_agent(agent_id, for_update=True)

        if lead.status != LeadStatus.NEW or lead.assigned_agent_id is not None:
            raise LeadUnavailable(f"Lead {lead.id} is not queued (status={lead.status})")
        if not agent.is_active:
            raise AgentUnavailable(f"Agent {agent.id} is inactive")

        # Each claim gets its own savepoint. A unique rejection on Agent.current_lead
        # means the lead is taken; one on Lead.assigned_agent means the agent is.
        try:
            with transaction.atomic():
                claimed = store.claim_agent(agent.id, lead.id)
        except IntegrityError as exc:
            logger.warning("Lead %s is already held by another agent: %s", lead.id, exc)
            raise LeadUnavailable(f"Lead {lead.id} is already held by another agent")
        if not claimed:
            raise AgentUnavailable(f"Agent {agent.id} is no longer available")

        try:
            with transaction.atomic():
                claimed = store.claim_lead(lead.id, agent.id, now)
        except IntegrityError as exc:
            logger.warning("Agent %s is already assigned another lead: %s", agent.id, exc)
            raise AgentUnavailable(f"Agent {agent.id} is already assigned another lead")
        if not claimed:
            raise LeadUnavailable(f"Lead {lead.id} was claimed by another agent")

        Event.objects.create(
            lead_id=lead.id,
            agent_id=agent.id,
            event_type="lead_assigned",
            source=source,
            source_id=str(agent.id),
            payload={"retry_count": lead.retry_count},
            description=f"Lead assigned to {agent.name}",
        )

    lead.refresh_from_db()
    agent.refresh_from_db()

    logger.info("Assigned lead %s to agent %s", lead.id, agent.id)
    return lead, agent
