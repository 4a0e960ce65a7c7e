"""
Distribution API — operator-triggered batch runs and the live pool/queue counts.
"""
from rest_framework.views import APIView
from rest_framework.response import Response

from dialer.services.distribution import distribute_leads, get_distribution_stats


class DistributeLeadsView(APIView):
    """Run one distribution batch now and report what happened to each lead."""

    def post(self, request):
        results = distribute_leads()
        assigned = sum(1 for r in results if r.success)
        return Response({
            "message": "Distribution complete",
            "assigned": assigned,
            "unassigned": len(results) - assigned,
            "results": [r.to_dict() for r in results],
        })


class DistributionStatsView(APIView):
    """Lead counts by status and agent availability."""

    def get(self, request):
        return Response(get_distribution_stats())
