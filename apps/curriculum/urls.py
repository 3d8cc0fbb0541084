# apps/curriculum/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'curriculum'

router = DefaultRouter()
router.register(r'topics', views.TopicViewSet, basename='topic')
router.register(r'tests', views.ClassTestViewSet, basename='test')
router.register(r'progress', views.ProgressViewSet, basename='progress')

urlpatterns = [
    path('', include(router.urls)),
]
