"""
URL configuration for the RecruitOps project.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/automations/', include('automations.api.urls', namespace='automations-api')),
]
