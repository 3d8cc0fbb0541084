"""
URL configuration for the scheduling project.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/academics/', include('apps.academics.urls')),
    path('api/curriculum/', include('apps.curriculum.urls')),
    path('api/detentions/', include('apps.detentions.urls')),
    path('api/followups/', include('apps.followups.urls')),
    path('api-auth/', include('rest_framework.urls')),
]
