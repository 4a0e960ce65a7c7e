"""
Agent API — pool management plus the agent-facing "give me work" endpoint.

Authentication is handled in front of this service; the calling agent is
identified by the id in the URL.
"""
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from dialer.exceptions import DialerError
from dialer.models import Agent, Call, Event
from dialer.serializers import AgentCreateSerializer, AgentSerializer, CallSerializer, LeadSerializer
from dialer.services.call_lifecycle import get_active_call
from dialer.services.distribution import get_lead_for_agent
from dialer.api.responses import error_response
from dialer.utils import clamp_limit, utcnow


class AgentListCreateView(APIView):
    """List active agents and add agents to the pool."""

    def get(self, request):
        agents = Agent.objects.filter(is_active=True).order_by("name")
        return Response(AgentSerializer(agents, many=True).data)

    def post(self, request):
        serializer = AgentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        agent = Agent.objects.create(**serializer.validated_data)

        Event.objects.create(
            agent_id=agent.id,
            event_type="agent_created",
            source="operator",
            description=f"Agent created: {agent.name}",
        )

        return Response(AgentSerializer(agent).data, status=status.HTTP_201_CREATED)


class AgentDetailView(APIView):
    """Agent detail and soft-delete."""

    def get(self, request, agent_id):
        try:
            agent = Agent.objects.get(id=agent_id)
        except Agent.DoesNotExist:
            return Response({"detail": "Agent not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(AgentSerializer(agent).data)

    def delete(self, request, agent_id):
        """Deactivate an agent. Refused while the agent still holds a lead."""
        try:
            agent = Agent.objects.get(id=agent_id)
        except Agent.DoesNotExist:
            return Response({"detail": "Agent not found"}, status=status.HTTP_404_NOT_FOUND)

        deactivated = (
            Agent.objects
            .filter(id=agent.id, is_active=True, current_lead__isnull=True)
            .update(is_active=False)
        )
        if not deactivated:
            agent.refresh_from_db()
            if agent.current_lead_id:
                return Response(
                    {"detail": "Agent is holding a lead; end the call first", "code": "conflict"},
                    status=status.HTTP_409_CONFLICT,
                )
            return Response({"detail": "Agent already inactive", "agent_id": str(agent.id)})

        Event.objects.create(
            agent_id=agent.id,
            event_type="agent_deactivated",
            source="operator",
            description=f"Agent deactivated: {agent.name}",
        )

        return Response({"detail": "Deactivated", "agent_id": str(agent.id)})


class AgentLeadView(APIView):
    """The agent's current lead, claiming the next one from the queue if needed."""

    def get(self, request, agent_id):
        try:
            lead = get_lead_for_agent(agent_id)
        except DialerError as e:
            return error_response(e)

        if lead is None:
            return Response({"message": "No leads available", "lead": None})
        return Response({"lead": LeadSerializer(lead).data})


class AgentCallsView(APIView):
    """The agent's calls, most recent first."""

    def get(self, request, agent_id):
        if not Agent.objects.filter(id=agent_id).exists():
            return Response({"detail": "Agent not found"}, status=status.HTTP_404_NOT_FOUND)

        limit = clamp_limit(request.query_params.get("limit"), default=20, maximum=100)
        calls = Call.objects.filter(agent_id=agent_id).order_by("-started_at")[:limit]
        return Response(CallSerializer(calls, many=True).data)


class AgentActiveCallView(APIView):
    """The agent's in-progress call, with elapsed seconds so far."""

    def get(self, request, agent_id):
        try:
            call = get_active_call(agent_id)
        except DialerError as e:
            return error_response(e)

        if call is None:
            return Response({"message": "No active call", "call": None})

        data = CallSerializer(call).data
        data["elapsed_seconds"] = int((utcnow() - call.started_at).total_seconds())
        return Response({"call": data})
