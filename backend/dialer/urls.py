"""
App URL configuration — the agent dialer and operator endpoints.
"""
from django.urls import path
from dialer.api import agents, calls, distribution, leads

urlpatterns = [
    # Leads
    path('leads/', leads.LeadListCreateView.as_view()),
    path('leads/<uuid:lead_id>', leads.LeadDetailView.as_view()),
    path('leads/<uuid:lead_id>/history', leads.LeadHistoryView.as_view()),

    # Agents
    path('agents/', agents.AgentListCreateView.as_view()),
    path('agents/<uuid:agent_id>', agents.AgentDetailView.as_view()),
    path('agents/<uuid:agent_id>/lead', agents.AgentLeadView.as_view()),
    path('agents/<uuid:agent_id>/calls', agents.AgentCallsView.as_view()),
    path('agents/<uuid:agent_id>/active-call', agents.AgentActiveCallView.as_view()),

    # Calls
    path('calls/start', calls.StartCallView.as_view()),
    path('calls/end', calls.EndCallView.as_view()),

    # Distribution
    path('distribution/run', distribution.DistributeLeadsView.as_view()),
    path('distribution/stats', distribution.DistributionStatsView.as_view()),
]
