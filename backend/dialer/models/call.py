import uuid
from django.db import models


class CallStatus(models.TextChoices):
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    NO_ANSWER = "no_answer", "No answer"
    NOT_INTERESTED = "not_interested", "Not interested"
    MEETING_SCHEDULED = "meeting_scheduled", "Meeting scheduled"


class CallOutcome(models.TextChoices):
    """What the agent reports when hanging up."""
    NO_ANSWER = "no_answer", "No answer"
    NOT_INTERESTED = "not_interested", "Not interested"
    MEETING_SCHEDULED = "meeting_scheduled", "Meeting scheduled"
    COMPLETED = "completed", "Completed"
    CALL_RECORDED = "call_recorded", "Call recorded"


class CallQuality(models.TextChoices):
    EXCELLENT = "excellent", "Excellent"
    GOOD = "good", "Good"
    FAIR = "fair", "Fair"
    POOR = "poor", "Poor"


class Call(models.Model):
    """
    One phone session between an agent and the lead it currently holds.

    Opened in_progress, closed exactly once into a terminal status. Calls are
    never deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lead = models.ForeignKey("Lead", on_delete=models.PROTECT, related_name="calls")
    agent = models.ForeignKey("Agent", on_delete=models.PROTECT, related_name="calls")

    started_at = models.DateTimeField()
    ended_at = models.DateTimeField(null=True, blank=True)
    duration_seconds = models.IntegerField(null=True, blank=True)  # set once at close

    status = models.CharField(
        max_length=30, choices=CallStatus.choices, default=CallStatus.IN_PROGRESS
    )

    notes = models.TextField(blank=True, default="")
    recording_url = models.CharField(max_length=500, null=True, blank=True)
    quality_rating = models.CharField(
        max_length=20, choices=CallQuality.choices, null=True, blank=True
    )
    meeting_details = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "calls"
        ordering = ["-started_at"]
        indexes = [
            models.Index(fields=["lead", "agent"], name="idx_call_lead_agent"),
            models.Index(fields=["agent", "-started_at"], name="idx_call_agent_started"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["agent"],
                condition=models.Q(status="in_progress"),
                name="uniq_call_agent_in_progress",
            ),
        ]

    def __str__(self):
        return f"Call {self.id} lead={self.lead_id} agent={self.agent_id} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.status == CallStatus.IN_PROGRESS
