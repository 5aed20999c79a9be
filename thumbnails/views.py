"""
Read-only API views for post thumbnails.
"""
import logging

from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from thumbnails.models import Post
from thumbnails.serializers import PostSerializer, ProcessedPostsSerializer
from thumbnails.services import ThumbnailService
from thumbnails.store import get_content_store

logger = logging.getLogger(__name__)


class PostViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for posts.

    Supports filtering by post type and searching by title.
    """
    queryset = Post.objects.all()
    serializer_class = PostSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['post_type']
    search_fields = ['title']
    ordering_fields = ['created_at', 'id']
    ordering = ['-created_at', '-id']


class ProcessedPostsView(APIView):
    """Posts processed by the thumbnail command, by mode (unset or multiple)."""

    def get(self, request, mode):
        if mode not in ThumbnailService.MODES:
            return Response(
                {'error': f"mode must be one of: {', '.join(ThumbnailService.MODES)}"},
                status=status.HTTP_400_BAD_REQUEST
            )

        post_type = request.query_params.get('post_type') or settings.POST_THUMBS_DEFAULT_POST_TYPE
        service = ThumbnailService(
            get_content_store(),
            attachment_limit=settings.POST_THUMBS_ATTACHMENT_LIMIT,
        )
        ids = service.show(mode, post_type)
        logger.debug(f"[thumbnail] Report {mode}/{post_type}: {len(ids)} posts")

        serializer = ProcessedPostsSerializer({'mode': mode, 'post_type': post_type, 'ids': ids})
        return Response(serializer.data)
