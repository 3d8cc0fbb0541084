# apps/academics/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'academics'

router = DefaultRouter()
router.register(r'terms', views.TermViewSet, basename='term')
router.register(r'classrooms', views.ClassroomViewSet, basename='classroom')
router.register(r'classes', views.ClassViewSet, basename='class')

urlpatterns = [
    path('', include(router.urls)),
]
