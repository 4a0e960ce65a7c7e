import uuid
from django.db import models


class Agent(models.Model):
    """
    A call-center worker who holds at most one lead at a time.

    is_available is true exactly when current_lead is empty; both are only
    changed together, inside the assignment and call-end transactions.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)

    is_active = models.BooleanField(default=True)  # soft-delete flag
    is_available = models.BooleanField(default=True)

    # One-to-one: the database refuses two agents holding the same lead
    current_lead = models.OneToOneField(
        "Lead", on_delete=models.SET_NULL, null=True, blank=True, related_name="holding_agent"
    )

    # Monotonic counters
    total_calls = models.PositiveIntegerField(default=0)
    successful_calls = models.PositiveIntegerField(default=0)
    meetings_scheduled = models.PositiveIntegerField(default=0)

    last_activity_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "agents"
        ordering = ["name"]
        indexes = [
            models.Index(
                fields=["is_active", "is_available", "last_activity_at"],
                name="idx_agent_idle",
            ),
        ]

    def __str__(self):
        state = "available" if self.is_available else "busy"
        return f"{self.name} ({state})"

    @property
    def stats(self) -> dict:
        return {
            "total_calls": self.total_calls,
            "successful_calls": self.successful_calls,
            "meetings_scheduled": self.meetings_scheduled,
        }
