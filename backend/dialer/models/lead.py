import uuid
from django.conf import settings
from django.db import models


class LeadStatus(models.TextChoices):
    NEW = "new", "New"
    ASSIGNED = "assigned", "Assigned"
    CALLING = "calling", "Calling"
    NO_ANSWER = "no_answer", "No answer"
    NOT_INTERESTED = "not_interested", "Not interested"
    MEETING_SCHEDULED = "meeting_scheduled", "Meeting scheduled"
    COMPLETED = "completed", "Completed"


class Lead(models.Model):
    """
    A Lead is a prospective customer waiting in the call queue.
    This is the central entity — calls, history entries and events all link to a lead.

    Queue eligibility is status AND time: a lead reading "new" with a
    next_eligible_at in the future is still cooling down after a missed call.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Contact info (opaque to the distribution engine)
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=30)
    email = models.EmailField()
    notes = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=30, choices=LeadStatus.choices, default=LeadStatus.NEW, db_index=True
    )
    # Lifecycle:
    #   new → assigned → calling → (new after cooldown | not_interested | meeting_scheduled | completed)

    # One-to-one: the database refuses two leads pointing at the same agent
    assigned_agent = models.OneToOneField(
        "Agent", on_delete=models.SET_NULL, null=True, blank=True, related_name="assigned_lead"
    )

    retry_count = models.PositiveSmallIntegerField(default=0)
    last_call_attempt_at = models.DateTimeField(null=True, blank=True)
    next_eligible_at = models.DateTimeField(null=True, blank=True)

    meeting_details = models.JSONField(null=True, blank=True)  # scheduled_date, location, notes

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "leads"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["status", "next_eligible_at"], name="idx_lead_status_eligible"),
            models.Index(fields=["status", "created_at"], name="idx_lead_status_created"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(retry_count__lte=settings.MAX_RETRY_ATTEMPTS),
                name="chk_lead_retry_cap",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.status})"
