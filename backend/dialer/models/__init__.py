from dialer.models.lead import Lead, LeadStatus
from dialer.models.agent import Agent
from dialer.models.call import Call, CallStatus, CallOutcome, CallQuality
from dialer.models.call_history import CallHistoryEntry
from dialer.models.event import Event

__all__ = [
    "Lead", "LeadStatus",
    "Agent",
    "Call", "CallStatus", "CallOutcome", "CallQuality",
    "CallHistoryEntry", "Event",
]
