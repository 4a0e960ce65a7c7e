from datetime import timedelta
from itertools import count

import pytest

from dialer.models import Agent, Lead
from dialer.utils import utcnow

_seq = count(1)


@pytest.fixture
def now():
    return utcnow().replace(microsecond=0)


@pytest.fixture
def make_agent(db):
    def _make(name=None, **fields):
        n = next(_seq)
        return Agent.objects.create(
            name=name or f"Agent {n}",
            email=fields.pop("email", f"agent{n}@example.com"),
            **fields,
        )
    return _make


@pytest.fixture
def make_lead(db, now):
    """
    Create a queued lead. age_minutes backdates created_at so FIFO order is
    explicit rather than depending on insert timing.
    """
    def _make(name=None, age_minutes=None, **fields):
        n = next(_seq)
        lead = Lead.objects.create(
            name=name or f"Lead {n}",
            phone=fields.pop("phone", f"+1-555-{n:04d}"),
            email=fields.pop("email", f"lead{n}@example.com"),
            **fields,
        )
        if age_minutes is not None:
            created_at = now - timedelta(minutes=age_minutes)
            Lead.objects.filter(id=lead.id).update(created_at=created_at)
            lead.refresh_from_db()
        return lead
    return _make


@pytest.fixture
def agent(make_agent):
    return make_agent("Anna")


@pytest.fixture
def lead(make_lead):
    return make_lead("Sarah", age_minutes=30)
