import uuid

import pytest
from rest_framework.test import APIClient

from dialer.models import Agent, Event, Lead, LeadStatus
from dialer.services.assignment import assign_lead_to_agent

pytestmark = pytest.mark.django_db


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def queued_tasks(monkeypatch):
    tasks = []
    monkeypatch.setattr("django_q.tasks.async_task", lambda func, **kwargs: tasks.append(func))
    return tasks


def test_health(api_client):
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


# ─── Leads ────────────────────────────────────────────────────────────────────

def test_create_lead_queues_a_distribution_run(api_client, queued_tasks):
    response = api_client.post(
        "/api/leads/",
        {"name": "Sarah Mitchell", "phone": "+1-555-0101", "email": "sarah@example.com"},
        format="json",
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "new"
    assert body["assigned_agent"] is None
    assert queued_tasks == ["dialer.services.distribution.run_distribution_sweep"]
    assert Event.objects.filter(lead_id=body["id"], event_type="lead_created").exists()


def test_create_lead_validates_input(api_client, queued_tasks):
    response = api_client.post("/api/leads/", {"name": "No phone", "email": "bad"}, format="json")

    assert response.status_code == 400
    assert Lead.objects.count() == 0
    assert queued_tasks == []


def test_list_leads_filters_and_paginates(api_client, make_lead):
    for _ in range(3):
        make_lead()
    make_lead(status=LeadStatus.COMPLETED)

    response = api_client.get("/api/leads/", {"status": "new", "limit": 2})

    body = response.json()
    assert response.status_code == 200
    assert len(body["leads"]) == 2
    assert body["pagination"] == {"offset": 0, "limit": 2, "total": 3}


def test_list_leads_rejects_unknown_status(api_client):
    assert api_client.get("/api/leads/", {"status": "sleeping"}).status_code == 400


def test_lead_detail_and_missing_lead(api_client, lead):
    response = api_client.get(f"/api/leads/{lead.id}")

    assert response.status_code == 200
    assert response.json()["lead"]["id"] == str(lead.id)
    assert response.json()["call_history"] == []
    assert api_client.get(f"/api/leads/{uuid.uuid4()}").status_code == 404
    assert api_client.get(f"/api/leads/{uuid.uuid4()}/history").status_code == 404


# ─── Agents ───────────────────────────────────────────────────────────────────

def test_create_and_list_agents(api_client, make_agent):
    make_agent(is_active=False)

    response = api_client.post("/api/agents/", {"name": "Piotr", "email": "piotr@example.com"}, format="json")

    assert response.status_code == 201
    assert response.json()["is_available"] is True
    assert response.json()["stats"] == {"total_calls": 0, "successful_calls": 0, "meetings_scheduled": 0}
    listed = api_client.get("/api/agents/").json()
    assert [a["email"] for a in listed] == ["piotr@example.com"]


def test_duplicate_agent_email_is_rejected(api_client, agent):
    response = api_client.post("/api/agents/", {"name": "Copy", "email": agent.email}, format="json")

    assert response.status_code == 400


def test_agent_asks_for_a_lead(api_client, lead, agent):
    response = api_client.get(f"/api/agents/{agent.id}/lead")

    assert response.status_code == 200
    assert response.json()["lead"]["id"] == str(lead.id)
    assert response.json()["lead"]["status"] == "assigned"


def test_agent_asks_for_a_lead_on_an_empty_queue(api_client, agent):
    response = api_client.get(f"/api/agents/{agent.id}/lead")

    assert response.status_code == 200
    assert response.json()["lead"] is None


def test_inactive_agent_asking_for_a_lead(api_client, lead, make_agent):
    retired = make_agent(is_active=False)

    response = api_client.get(f"/api/agents/{retired.id}/lead")

    assert response.status_code == 409
    assert response.json()["code"] == "agent_unavailable"


def test_deactivate_agent(api_client, agent):
    response = api_client.delete(f"/api/agents/{agent.id}")

    assert response.status_code == 200
    agent.refresh_from_db()
    assert agent.is_active is False
    assert Event.objects.filter(agent=agent, event_type="agent_deactivated").exists()


def test_deactivate_agent_holding_a_lead_is_refused(api_client, lead, agent, now):
    assign_lead_to_agent(lead.id, agent.id, now=now)

    response = api_client.delete(f"/api/agents/{agent.id}")

    assert response.status_code == 409
    assert Agent.objects.get(id=agent.id).is_active is True


# ─── Calls ────────────────────────────────────────────────────────────────────

def test_call_round_trip_hands_out_the_next_lead(api_client, make_lead, agent):
    first = make_lead(age_minutes=20)
    second = make_lead(age_minutes=10)
    api_client.get(f"/api/agents/{agent.id}/lead")

    started = api_client.post(
        "/api/calls/start", {"lead_id": str(first.id), "agent_id": str(agent.id)}, format="json",
    )
    assert started.status_code == 201
    call_id = started.json()["call"]["id"]

    active = api_client.get(f"/api/agents/{agent.id}/active-call").json()
    assert active["call"]["id"] == call_id
    assert active["call"]["elapsed_seconds"] >= 0

    ended = api_client.post(
        "/api/calls/end",
        {
            "agent_id": str(agent.id),
            "call_id": call_id,
            "outcome": "meeting_scheduled",
            "notes": "Demo booked",
            "claim_next": True,
            "meeting_details": {"scheduled_date": "2026-11-02T10:00:00Z", "location": "Video call"},
        },
        format="json",
    )

    assert ended.status_code == 200
    body = ended.json()
    assert body["call"]["status"] == "meeting_scheduled"
    assert body["next_lead"]["id"] == str(second.id)
    lead = Lead.objects.get(id=first.id)
    assert lead.status == LeadStatus.MEETING_SCHEDULED
    assert lead.meeting_details["location"] == "Video call"

    history = api_client.get(f"/api/leads/{first.id}/history").json()["history"]
    assert [h["result"] for h in history] == ["meeting_scheduled"]
    calls = api_client.get(f"/api/agents/{agent.id}/calls").json()
    assert [c["id"] for c in calls] == [call_id]


def test_start_call_by_non_owner(api_client, lead, agent, make_agent, now):
    assign_lead_to_agent(lead.id, agent.id, now=now)
    intruder = make_agent()

    response = api_client.post(
        "/api/calls/start", {"lead_id": str(lead.id), "agent_id": str(intruder.id)}, format="json",
    )

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_end_call_twice(api_client, lead, agent, now):
    assign_lead_to_agent(lead.id, agent.id, now=now)
    call_id = api_client.post(
        "/api/calls/start", {"lead_id": str(lead.id), "agent_id": str(agent.id)}, format="json",
    ).json()["call"]["id"]
    payload = {"agent_id": str(agent.id), "call_id": call_id, "outcome": "not_interested"}

    assert api_client.post("/api/calls/end", payload, format="json").status_code == 200
    again = api_client.post("/api/calls/end", payload, format="json")

    assert again.status_code == 409
    assert again.json()["code"] == "already_closed"
    assert Agent.objects.get(id=agent.id).total_calls == 1


def test_end_call_with_unknown_outcome(api_client, agent):
    response = api_client.post(
        "/api/calls/end", {"agent_id": str(agent.id), "outcome": "hung_up"}, format="json",
    )

    assert response.status_code == 400


# ─── Distribution ─────────────────────────────────────────────────────────────

def test_run_distribution_and_stats(api_client, make_lead, agent):
    make_lead(age_minutes=20)
    make_lead(age_minutes=10)

    response = api_client.post("/api/distribution/run")

    body = response.json()
    assert response.status_code == 200
    assert body["assigned"] == 1
    assert body["unassigned"] == 1
    assert body["results"][1]["reason"] == "no_available_agents"

    stats = api_client.get("/api/distribution/stats").json()
    assert stats["leads"]["by_status"]["assigned"] == 1
    assert stats["agents"] == {"total": 1, "available": 0, "busy": 1}


def test_end_call_leaves_the_queue_alone_unless_asked(api_client, make_lead, agent, now):
    first = make_lead(age_minutes=20)
    waiting = make_lead(age_minutes=10)
    assign_lead_to_agent(first.id, agent.id, now=now)
    api_client.post("/api/calls/start", {"lead_id": str(first.id), "agent_id": str(agent.id)}, format="json")

    response = api_client.post(
        "/api/calls/end", {"agent_id": str(agent.id), "outcome": "completed"}, format="json",
    )

    assert response.status_code == 200
    assert response.json()["next_lead"] is None
    assert Lead.objects.get(id=waiting.id).status == LeadStatus.NEW
    assert Agent.objects.get(id=agent.id).is_available is True
