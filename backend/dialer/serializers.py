"""
DRF serializers for API request/response validation.
Separates API contract from DB models.
"""
from rest_framework import serializers
from dialer.models import Agent, Call, CallHistoryEntry, CallOutcome, CallQuality, Event, Lead, LeadStatus


# ─── Lead Serializers ────────────────────────────────────────────────────────

class LeadCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lead
        fields = ['name', 'phone', 'email', 'notes']


class LeadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lead
        fields = [
            'id', 'name', 'phone', 'email', 'notes', 'status',
            'assigned_agent', 'retry_count', 'last_call_attempt_at',
            'next_eligible_at', 'meeting_details', 'created_at', 'updated_at',
        ]


class LeadListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=LeadStatus.choices, required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)


class CallHistoryEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = CallHistoryEntry
        fields = [
            'sequence', 'lead_id', 'agent_id', 'call_id', 'result',
            'notes', 'recording_url', 'recorded_at',
        ]


# ─── Agent Serializers ───────────────────────────────────────────────────────

class AgentCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Agent
        fields = ['name', 'email']


class AgentSerializer(serializers.ModelSerializer):
    stats = serializers.DictField(read_only=True)

    class Meta:
        model = Agent
        fields = [
            'id', 'name', 'email', 'is_active', 'is_available',
            'current_lead', 'stats', 'last_activity_at', 'created_at',
        ]


# ─── Call Serializers ────────────────────────────────────────────────────────

class MeetingDetailsSerializer(serializers.Serializer):
    scheduled_date = serializers.DateTimeField(required=False, allow_null=True)
    location = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        # Stored as JSON, so datetimes go back out as ISO strings
        value = super().to_internal_value(data)
        if value.get('scheduled_date'):
            value['scheduled_date'] = value['scheduled_date'].isoformat()
        return value


class StartCallSerializer(serializers.Serializer):
    lead_id = serializers.UUIDField()
    agent_id = serializers.UUIDField()


class EndCallSerializer(serializers.Serializer):
    """
    Payload to close a call. call_id may be omitted to close the agent's open call;
    claim_next asks for the agent's next lead in the same response.
    """
    agent_id = serializers.UUIDField()
    call_id = serializers.UUIDField(required=False, allow_null=True)
    outcome = serializers.ChoiceField(choices=CallOutcome.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    recording_url = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    quality_rating = serializers.ChoiceField(choices=CallQuality.choices, required=False, allow_null=True)
    meeting_details = MeetingDetailsSerializer(required=False, allow_null=True)
    claim_next = serializers.BooleanField(required=False, default=False)


class CallSerializer(serializers.ModelSerializer):
    class Meta:
        model = Call
        fields = [
            'id', 'lead_id', 'agent_id', 'started_at', 'ended_at',
            'duration_seconds', 'status', 'notes', 'recording_url',
            'quality_rating', 'meeting_details', 'created_at',
        ]


# ─── Event Serializers ───────────────────────────────────────────────────────

class EventSerializer(serializers.ModelSerializer):
    class Meta:
        model = Event
        fields = [
            'id', 'lead_id', 'agent_id', 'event_type', 'source', 'source_id',
            'payload', 'description', 'created_at',
        ]
