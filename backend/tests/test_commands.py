from io import StringIO

import pytest
from django.core.management import call_command
from django_q.models import Schedule

pytestmark = pytest.mark.django_db


def test_distribute_leads_command(make_lead, agent):
    make_lead(age_minutes=20)
    make_lead(age_minutes=10)
    out = StringIO()

    call_command("distribute_leads", "--verbose-results", stdout=out)

    output = out.getvalue()
    assert "1 assigned, 1 unassigned of 2 eligible" in output
    assert "no_available_agents" in output


def test_distribute_leads_command_on_empty_queue():
    out = StringIO()

    call_command("distribute_leads", stdout=out)

    assert "No eligible leads" in out.getvalue()


def test_setup_distribution_sweep_is_idempotent(settings):
    settings.DISTRIBUTION_SWEEP_MINUTES = 5

    call_command("setup_distribution_sweep", stdout=StringIO())
    call_command("setup_distribution_sweep", stdout=StringIO())

    schedule = Schedule.objects.get(name="lead_distribution_sweep")
    assert schedule.func == "dialer.services.distribution.run_distribution_sweep"
    assert schedule.minutes == 5
    assert Schedule.objects.filter(name="lead_distribution_sweep").count() == 1
