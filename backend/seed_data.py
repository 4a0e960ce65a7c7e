"""
Seed data script — populates the database with a small agent pool and a lead
queue, then walks a few leads through the call lifecycle so every status and
the retry cooldown show up in the dashboard.

Usage: cd backend && python manage.py migrate --run-syncdb && python seed_data.py
"""
import os
import sys
import django

# Setup Django
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'call_center.settings')
django.setup()

from dialer.models import Agent, Lead
from dialer.services.call_lifecycle import end_call, start_call
from dialer.services.distribution import distribute_leads, get_distribution_stats


AGENTS = [
    {"name": "Anna Kowalska", "email": "anna.kowalska@example.com"},
    {"name": "Piotr Nowak", "email": "piotr.nowak@example.com"},
    {"name": "Marta Wisniewska", "email": "marta.wisniewska@example.com"},
]

LEADS = [
    {"name": "Sarah Mitchell", "phone": "+1-555-0101", "email": "sarah.mitchell@example.com",
     "notes": "Asked for a callback about the premium plan"},
    {"name": "David Chen", "phone": "+1-555-0102", "email": "david.chen@example.com",
     "notes": "Came from the spring webinar"},
    {"name": "Maria Rodriguez", "phone": "+1-555-0103", "email": "maria.rodriguez@example.com"},
    {"name": "James Thompson", "phone": "+1-555-0104", "email": "james.thompson@example.com",
     "notes": "Prefers afternoon calls"},
    {"name": "Priya Patel", "phone": "+1-555-0105", "email": "priya.patel@example.com"},
    {"name": "Robert Williams", "phone": "+1-555-0106", "email": "robert.williams@example.com",
     "notes": "Existing customer, upsell candidate"},
]

# How the first calls of the seeded shift end, one per agent
FIRST_CALL_OUTCOMES = [
    ("meeting_scheduled", "Demo booked for next week",
     {"scheduled_date": "2026-11-02T10:00:00+00:00", "location": "Video call", "notes": "Bring pricing"}),
    ("no_answer", "Voicemail, will retry", None),
    ("not_interested", "Already signed with a competitor", None),
]


def seed():
    # Check if already seeded
    existing = Lead.objects.count()
    if existing > 0:
        print(f"Database already has {existing} leads. Skipping seed.")
        print("Run 'python manage.py flush --no-input' to clear, then re-seed.")
        return

    agents = [Agent.objects.create(**data) for data in AGENTS]
    print(f"Created {len(agents)} agents")

    for lead_data in LEADS:
        Lead.objects.create(**lead_data)
    print(f"Created {len(LEADS)} leads")

    results = distribute_leads()
    assigned = [r for r in results if r.success]
    print(f"First distribution: {len(assigned)} assigned, {len(results) - len(assigned)} waiting")

    # Each agent works the lead it was handed
    for result, (outcome, notes, meeting) in zip(assigned, FIRST_CALL_OUTCOMES):
        call = start_call(result.lead_id, result.agent_id)
        end_call(result.agent_id, outcome, notes=notes, meeting_details=meeting, call_id=call.id)
        lead = Lead.objects.get(id=result.lead_id)
        print(f"  {lead.name:18s} | {outcome:18s} -> {lead.status}")

    results = distribute_leads()
    print(f"Second distribution: {sum(1 for r in results if r.success)} assigned")

    # Print summary
    stats = get_distribution_stats()
    print(f"\n{'='*50}")
    print("Seed complete!\n")
    for status, count in stats["leads"]["by_status"].items():
        print(f"  {status:18s} {count}")
    print(f"\n  Agents: {stats['agents']['available']} available, {stats['agents']['busy']} busy")
    print(f"\nRun the server: python manage.py runserver")


if __name__ == "__main__":
    seed()
