"""
Distribution Orchestrator

Batch and on-demand entry points into the assignment engine:

- distribute_leads()        — walk the queue oldest-first, pairing each lead with an idle agent
- get_lead_for_agent()      — an agent asks for work; returns what it holds or claims the next lead
- get_distribution_stats()  — read-only counts for the operator dashboard
- run_distribution_sweep()  — django-q task wrapper around distribute_leads()
- queue_distribution()      — enqueue a sweep (used after lead creation)

The batch is not atomic as a whole. Each pairing commits on its own, so a
crash mid-batch leaves only the unprocessed tail in the queue. Every lead
the batch looked at appears in the result list, with a reason when it was
not assigned.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from django.db.models import Count

from dialer import store
from dialer.exceptions import AgentUnavailable, Conflict, LeadUnavailable, NotFound
from dialer.models import Agent, Lead, LeadStatus
from dialer.services.assignment import assign_lead_to_agent, find_idle_agent
from dialer.utils import utcnow

logger = logging.getLogger(__name__)

NO_AVAILABLE_AGENTS = "no_available_agents"


@dataclass
class AssignmentResult:
    lead_id: UUID
    agent_id: UUID | None = None
    success: bool = False
    reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "lead_id": str(self.lead_id),
            "agent_id": str(self.agent_id) if self.agent_id else None,
            "success": self.success,
            "reason": self.reason,
        }


# ─── Batch distribution ───────────────────────────────────────────────────────

def distribute_leads(now=None) -> list[AssignmentResult]:
    """
    Assign every eligible lead to an idle agent, oldest lead first.

    Once the agent pool runs dry, the remaining leads are reported as
    no_available_agents without querying again. A lost race on one lead is
    recorded with its reason and does not stop the batch.
    """
    now = now or utcnow()
    lead_ids = list(store.eligible_leads(now).values_list("id", flat=True))

    results: list[AssignmentResult] = []
    agents_exhausted = False

    for lead_id in lead_ids:
        if agents_exhausted:
            results.append(AssignmentResult(lead_id=lead_id, reason=NO_AVAILABLE_AGENTS))
            continue

        agent = find_idle_agent()
        if agent is None:
            agents_exhausted = True
            results.append(AssignmentResult(lead_id=lead_id, reason=NO_AVAILABLE_AGENTS))
            continue

        try:
            assign_lead_to_agent(lead_id, agent.id, now=now)
        except (Conflict, NotFound) as exc:
            logger.warning("Could not assign lead %s to agent %s: %s", lead_id, agent.id, exc.detail)
            results.append(AssignmentResult(lead_id=lead_id, agent_id=agent.id, reason=exc.code))
            continue

        results.append(AssignmentResult(lead_id=lead_id, agent_id=agent.id, success=True))

    assigned = sum(1 for r in results if r.success)
    logger.info(
        "Distribution batch: %d eligible, %d assigned, %d unassigned",
        len(results), assigned, len(results) - assigned,
    )
    return results


# ─── On-demand assignment ─────────────────────────────────────────────────────

def get_lead_for_agent(agent_id, now=None) -> Lead | None:
    """
    Return the lead the agent already holds, or claim the oldest eligible one.

    Returns None when the queue is empty. If another request claims the
    chosen lead first, the next eligible lead is tried; if the agent itself
    was paired meanwhile (e.g. by a concurrent batch), that lead is returned.
    """
    now = now or utcnow()
    agent = store.get_agent(agent_id)

    if agent.current_lead_id:
        return store.get_lead(agent.current_lead_id)
    if not agent.is_active:
        raise AgentUnavailable(f"Agent {agent.id} is inactive")

    tried: set = set()
    while True:
        candidate = store.eligible_leads(now).exclude(id__in=tried).first()
        if candidate is None:
            return None
        try:
            lead, _ = assign_lead_to_agent(candidate.id, agent.id, now=now, source="agent")
            return lead
        except LeadUnavailable:
            tried.add(candidate.id)
        except AgentUnavailable:
            agent.refresh_from_db()
            if agent.current_lead_id:
                return store.get_lead(agent.current_lead_id)
            raise


# ─── Stats ────────────────────────────────────────────────────────────────────

def get_distribution_stats(now=None) -> dict:
    now = now or utcnow()

    status_counts = (
        Lead.objects
        .values("status")
        .annotate(count=Count("id"))
        .order_by()
    )
    counted = {row["status"]: row["count"] for row in status_counts}
    by_status = {value: counted.get(value, 0) for value in LeadStatus.values}

    active_agents = Agent.objects.filter(is_active=True)
    total_agents = active_agents.count()
    available_agents = active_agents.filter(is_available=True).count()

    return {
        "leads": {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "eligible": store.eligible_leads(now).count(),
        },
        "agents": {
            "total": total_agents,
            "available": available_agents,
            "busy": total_agents - available_agents,
        },
    }


# ─── django-q integration ─────────────────────────────────────────────────────

def run_distribution_sweep() -> str:
    """
    Runs every DISTRIBUTION_SWEEP_MINUTES via django-q Schedule, and on demand
    after a lead is created. Returns a short status string for the task log.
    """
    try:
        results = distribute_leads()
    except Exception:
        logger.exception("Distribution sweep failed")
        raise
    assigned = sum(1 for r in results if r.success)
    return f"sweep complete: {assigned} assigned, {len(results) - assigned} waiting"


def queue_distribution(reason: str) -> None:
    """Enqueue a distribution sweep; the periodic schedule is the fallback."""
    try:
        from django_q.tasks import async_task
        async_task(
            "dialer.services.distribution.run_distribution_sweep",
            task_name=f"distribution_sweep_{reason}",
            q_options={"timeout": 60},
        )
    except Exception:
        logger.warning(
            "django-q not available; distribution will rely on the periodic sweep (%s)", reason,
        )
