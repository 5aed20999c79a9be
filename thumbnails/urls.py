"""
URL configuration for thumbnails app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from thumbnails.views import PostViewSet, ProcessedPostsView

router = DefaultRouter()
router.register(r'posts', PostViewSet, basename='post')

app_name = 'thumbnails'

urlpatterns = [
    path('', include(router.urls)),
    path('processed/<str:mode>/', ProcessedPostsView.as_view(), name='processed'),
]
