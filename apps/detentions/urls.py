# apps/detentions/urls.py

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from . import views

app_name = 'detentions'

router = SimpleRouter()
router.register(r'slots', views.DetentionSlotViewSet, basename='detention-slot')
router.register(r'', views.DetentionViewSet, basename='detention')

urlpatterns = [
    path('', include(router.urls)),
]
