"""
Shared fixtures for the thumbnail command tests.
"""
import pytest

from thumbnails.services import ThumbnailService
from thumbnails.store import InMemoryContentStore


@pytest.fixture
def store():
    return InMemoryContentStore()


@pytest.fixture
def service(store):
    """Service with the default fetch limit of one attached image."""
    return ThumbnailService(store)


@pytest.fixture
def wide_service(store):
    """Service fetching up to three attached images per post."""
    return ThumbnailService(store, attachment_limit=3)


@pytest.fixture
def make_post(db):
    """Create a Post with optional image attachments, oldest attachment first."""
    from thumbnails.models import Attachment, Post

    def _make_post(post_type='post', images=0, **kwargs):
        post = Post.objects.create(post_type=post_type, **kwargs)
        for i in range(images):
            Attachment.objects.create(
                post=post,
                title=f'image {i}',
                file_url=f'https://example.com/{post.pk}-{i}.jpg',
                mime_type='image/jpeg',
            )
        return post

    return _make_post
