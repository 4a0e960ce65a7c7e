import uuid
from django.db import models


class Event(models.Model):
    """
    Append-only event log — the audit trail of every assignment, call and release.
    Every meaningful state change is recorded as an event, so a lead's or an
    agent's timeline can be reconstructed after the fact.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lead = models.ForeignKey(
        "Lead", on_delete=models.CASCADE, null=True, blank=True, related_name="events"
    )
    agent = models.ForeignKey(
        "Agent", on_delete=models.CASCADE, null=True, blank=True, related_name="events"
    )

    # Event classification
    event_type = models.CharField(max_length=50, db_index=True)
    # Types: lead_created, lead_assigned, call_started, call_ended, lead_requeued,
    #        agent_released, agent_created, agent_deactivated

    # What triggered this event
    source = models.CharField(max_length=50)  # "system", "agent", "operator"
    source_id = models.CharField(max_length=36, null=True, blank=True)

    payload = models.JSONField(default=dict, blank=True)

    # Human-readable description
    description = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "events"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["lead", "-created_at"], name="idx_event_lead_date"),
            models.Index(fields=["agent", "-created_at"], name="idx_event_agent_date"),
        ]

    def __str__(self):
        return f"{self.event_type} lead={self.lead_id} agent={self.agent_id} at {self.created_at}"
