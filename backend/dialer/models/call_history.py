import uuid
from django.db import models

from dialer.models.call import CallOutcome


class CallHistoryEntry(models.Model):
    """
    Append-only record of how each call on a lead ended.

    sequence is 1-based per lead and is assigned while the lead row is locked,
    so entries keep the order in which calls were closed. Rows are never
    updated or reordered.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lead = models.ForeignKey("Lead", on_delete=models.CASCADE, related_name="call_history")
    agent = models.ForeignKey(
        "Agent", on_delete=models.SET_NULL, null=True, related_name="call_history_entries"
    )
    call = models.OneToOneField(
        "Call", on_delete=models.SET_NULL, null=True, blank=True, related_name="history_entry"
    )

    sequence = models.PositiveIntegerField()
    result = models.CharField(max_length=30, choices=CallOutcome.choices)
    notes = models.TextField(blank=True, default="")
    recording_url = models.CharField(max_length=500, null=True, blank=True)

    recorded_at = models.DateTimeField()

    class Meta:
        db_table = "call_history"
        ordering = ["lead", "sequence"]
        constraints = [
            models.UniqueConstraint(fields=["lead", "sequence"], name="uniq_history_lead_sequence"),
        ]

    def __str__(self):
        return f"#{self.sequence} {self.result} for lead={self.lead_id}"
