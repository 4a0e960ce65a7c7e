"""
Call API — the agent's start/end call actions.

Ending a call with claim_next=true also hands the agent its next lead, so the
dialer UI can move straight on without a second round-trip.
"""
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from dialer.exceptions import DialerError
from dialer.serializers import CallSerializer, EndCallSerializer, LeadSerializer, StartCallSerializer
from dialer.services.call_lifecycle import end_call, start_call
from dialer.services.distribution import get_lead_for_agent
from dialer.api.responses import error_response

logger = logging.getLogger(__name__)


class StartCallView(APIView):
    """Open a call on the lead the agent holds."""

    def post(self, request):
        serializer = StartCallSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            call = start_call(data["lead_id"], data["agent_id"])
        except DialerError as e:
            return error_response(e)

        return Response(
            {"message": "Call started", "call": CallSerializer(call).data},
            status=status.HTTP_201_CREATED,
        )


class EndCallView(APIView):
    """Close a call with its outcome; optionally claim the agent's next lead."""

    def post(self, request):
        serializer = EndCallSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            call = end_call(
                data["agent_id"],
                data["outcome"],
                notes=data.get("notes", ""),
                call_id=data.get("call_id"),
                meeting_details=data.get("meeting_details"),
                recording_url=data.get("recording_url"),
                quality_rating=data.get("quality_rating"),
            )
        except DialerError as e:
            return error_response(e)

        # The call is closed and committed; a failure here only costs the prefetch.
        next_lead = None
        if data["claim_next"]:
            try:
                next_lead = get_lead_for_agent(data["agent_id"])
            except DialerError as e:
                logger.warning("Next lead lookup failed for agent %s: %s", data["agent_id"], e.detail)

        return Response({
            "message": "Call ended",
            "call": CallSerializer(call).data,
            "next_lead": LeadSerializer(next_lead).data if next_lead else None,
        })
