# apps/followups/urls.py

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from . import views

app_name = 'followups'

router = SimpleRouter()
router.register(r'', views.FollowupViewSet, basename='followup')

urlpatterns = [
    path('', include(router.urls)),
]
