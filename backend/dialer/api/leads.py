"""
Lead API — queue intake and detail views for the operator dashboard.

Creating a lead queues a distribution sweep, so a new lead reaches an idle
agent without waiting for the periodic schedule.
"""
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from dialer.models import Call, CallHistoryEntry, Event, Lead
from dialer.serializers import (
    CallHistoryEntrySerializer, CallSerializer, EventSerializer,
    LeadCreateSerializer, LeadListQuerySerializer, LeadSerializer,
)
from dialer.services.distribution import queue_distribution


class LeadListCreateView(APIView):
    """List leads (newest first) and add leads to the queue."""

    def get(self, request):
        query = LeadListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        queryset = Lead.objects.all()
        if params.get("status"):
            queryset = queryset.filter(status=params["status"])

        total = queryset.count()
        offset, limit = params["offset"], params["limit"]
        page = queryset.order_by("-created_at")[offset:offset + limit]

        return Response({
            "leads": LeadSerializer(page, many=True).data,
            "pagination": {"offset": offset, "limit": limit, "total": total},
        })

    def post(self, request):
        serializer = LeadCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lead = Lead.objects.create(**serializer.validated_data)

        Event.objects.create(
            lead_id=lead.id,
            event_type="lead_created",
            source="operator",
            description=f"Lead created: {lead.name}",
        )

        queue_distribution(reason="lead_created")

        return Response(LeadSerializer(lead).data, status=status.HTTP_201_CREATED)


class LeadDetailView(APIView):
    """Full lead detail: current state, call history, calls and audit events."""

    def get(self, request, lead_id):
        try:
            lead = Lead.objects.get(id=lead_id)
        except Lead.DoesNotExist:
            return Response({"detail": "Lead not found"}, status=status.HTTP_404_NOT_FOUND)

        history = CallHistoryEntry.objects.filter(lead_id=lead_id).order_by("sequence")
        calls = Call.objects.filter(lead_id=lead_id).order_by("-started_at")
        events = Event.objects.filter(lead_id=lead_id).order_by("-created_at")

        return Response({
            "lead": LeadSerializer(lead).data,
            "call_history": CallHistoryEntrySerializer(history, many=True).data,
            "calls": CallSerializer(calls, many=True).data,
            "events": EventSerializer(events, many=True).data,
        })


class LeadHistoryView(APIView):
    """A lead's call history, in the order the calls ended."""

    def get(self, request, lead_id):
        if not Lead.objects.filter(id=lead_id).exists():
            return Response({"detail": "Lead not found"}, status=status.HTTP_404_NOT_FOUND)

        history = CallHistoryEntry.objects.filter(lead_id=lead_id).order_by("sequence")
        return Response({"history": CallHistoryEntrySerializer(history, many=True).data})
