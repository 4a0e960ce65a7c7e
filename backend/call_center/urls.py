"""
Root URL configuration for the Call Center service.

The operator/agent front-ends live elsewhere; this project only serves the API.
"""
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    return JsonResponse({"status": "healthy"})


urlpatterns = [
    path('api/', include('dialer.urls')),
    path('health', health_check),
]
