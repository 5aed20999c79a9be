"""
Content store used by the thumbnail command.

The command only talks to a ContentStore: a record query service, a metadata
store, a featured-image assignment primitive and an attached-media listing.
DjangoContentStore backs it with the ORM; InMemoryContentStore is a dict-backed
stand-in with the same behaviour.
"""
import logging
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import reduce
from typing import Dict, List, Optional, Sequence, Union

from django.apps import apps
from django.core.exceptions import ImproperlyConfigured
from django.db.models import Exists, OuterRef, Q

logger = logging.getLogger(__name__)

EXISTS = 'EXISTS'
NOT_EXISTS = 'NOT EXISTS'

# Reserved meta key standing in for the featured image in queries
FEATURED_IMAGE_KEY = '_thumbnail_id'

IMAGE_MIME_PREFIX = 'image/'


@dataclass(frozen=True)
class MetaClause:
    """A metadata-existence predicate."""
    key: str
    compare: str = EXISTS

    def __post_init__(self):
        if self.compare not in (EXISTS, NOT_EXISTS):
            raise ValueError(f"Unsupported meta comparison: {self.compare!r}")


@dataclass
class PostQuery:
    """
    Filter specification for the record query service.

    Args:
        post_type: A post type, a list of post types, or None for any type
        limit: Maximum number of IDs to return, None for unbounded
        relation: 'AND' or 'OR', how the clauses are combined
        clauses: Metadata-existence predicates
    """
    post_type: Union[str, Sequence[str], None] = 'post'
    limit: Optional[int] = None
    relation: str = 'AND'
    clauses: List[MetaClause] = field(default_factory=list)

    def __post_init__(self):
        self.relation = self.relation.upper()
        if self.relation not in ('AND', 'OR'):
            raise ValueError(f"Unsupported relation: {self.relation!r}")

    @property
    def post_types(self) -> Optional[List[str]]:
        if self.post_type is None:
            return None
        if isinstance(self.post_type, str):
            return [self.post_type]
        return list(self.post_type)


@dataclass
class QueryResult:
    """Matching post IDs, newest first, plus the match count ignoring the limit."""
    ids: List[int]
    found: int

    @property
    def post_count(self) -> int:
        return len(self.ids)


class ContentStore(ABC):
    """Capabilities the thumbnail command needs from the host content store."""

    @abstractmethod
    def query_posts(self, query: PostQuery) -> QueryResult:
        """Return IDs of posts matching the query."""

    @abstractmethod
    def get_post_meta(self, post_id: int, key: str) -> Optional[str]:
        """Return the meta value stored under key, or None."""

    @abstractmethod
    def update_post_meta(self, post_id: int, key: str, value) -> None:
        """Create or replace the meta value stored under key."""

    @abstractmethod
    def delete_post_meta(self, post_id: int, key: str) -> bool:
        """Delete key from the post. Returns whether anything was removed."""

    @abstractmethod
    def get_attached_images(self, parent_id: int, limit: Optional[int] = None) -> List[int]:
        """Return IDs of image attachments of a post in host default ordering."""

    @abstractmethod
    def set_featured_image(self, post_id: int, attachment_id: int) -> int:
        """Assign the featured image. Returns the attachment ID, or 0 on failure."""


class DjangoContentStore(ContentStore):
    """ContentStore backed by the thumbnails app models."""

    def _clause_q(self, clause: MetaClause) -> Q:
        from thumbnails.models import PostMeta

        if clause.key == FEATURED_IMAGE_KEY:
            condition = Q(featured_image__isnull=False)
        else:
            condition = Q(Exists(
                PostMeta.objects.filter(post=OuterRef('pk'), key=clause.key)
            ))
        return condition if clause.compare == EXISTS else ~condition

    def query_posts(self, query: PostQuery) -> QueryResult:
        from thumbnails.models import Post

        qs = Post.objects.all()
        post_types = query.post_types
        if post_types is not None:
            qs = qs.filter(post_type__in=post_types)

        if query.clauses:
            combine = operator.and_ if query.relation == 'AND' else operator.or_
            qs = qs.filter(reduce(combine, (self._clause_q(c) for c in query.clauses)))

        ids = qs.order_by('-created_at', '-id').values_list('id', flat=True)
        found = ids.count()
        if query.limit is not None:
            ids = ids[:query.limit]
        return QueryResult(ids=list(ids), found=found)

    def get_post_meta(self, post_id, key):
        from thumbnails.models import PostMeta

        return (
            PostMeta.objects
            .filter(post_id=post_id, key=key)
            .values_list('value', flat=True)
            .first()
        )

    def update_post_meta(self, post_id, key, value):
        from thumbnails.models import PostMeta

        PostMeta.objects.update_or_create(
            post_id=post_id, key=key, defaults={'value': str(value)}
        )

    def delete_post_meta(self, post_id, key):
        from thumbnails.models import PostMeta

        deleted, _ = PostMeta.objects.filter(post_id=post_id, key=key).delete()
        return deleted > 0

    def get_attached_images(self, parent_id, limit=None):
        from thumbnails.models import Attachment

        ids = (
            Attachment.objects
            .filter(post_id=parent_id, mime_type__startswith=IMAGE_MIME_PREFIX)
            .order_by('-uploaded_at', '-id')
            .values_list('id', flat=True)
        )
        if limit is not None:
            ids = ids[:limit]
        return list(ids)

    def set_featured_image(self, post_id, attachment_id):
        from thumbnails.models import Attachment, Post

        attachment = Attachment.objects.filter(
            pk=attachment_id, mime_type__startswith=IMAGE_MIME_PREFIX
        ).first()
        if attachment is None:
            logger.warning(f"[thumbnail] Attachment {attachment_id} is missing or not an image, cannot feature it on post {post_id}")
            return 0

        updated = Post.objects.filter(pk=post_id).update(featured_image=attachment)
        return attachment.pk if updated else 0


class InMemoryContentStore(ContentStore):
    """
    Dict-backed ContentStore.

    Posts and attachments share one ID sequence; a higher ID counts as newer,
    matching the newest-first ordering of the ORM store.
    """

    def __init__(self):
        self.posts: Dict[int, dict] = {}
        self.attachments: Dict[int, dict] = {}
        self.meta: Dict[int, Dict[str, str]] = {}
        self._next_id = 1

    def _allocate_id(self, requested=None):
        new_id = requested if requested is not None else self._next_id
        if new_id in self.posts or new_id in self.attachments:
            raise ValueError(f"ID {new_id} is already in use")
        self._next_id = max(self._next_id, new_id + 1)
        return new_id

    def add_post(self, post_type='post', post_id=None, featured_image=None):
        post_id = self._allocate_id(post_id)
        self.posts[post_id] = {'post_type': post_type, 'featured_image': featured_image}
        self.meta[post_id] = {}
        return post_id

    def add_attachment(self, parent_id=None, mime_type='image/jpeg', attachment_id=None):
        attachment_id = self._allocate_id(attachment_id)
        self.attachments[attachment_id] = {'parent': parent_id, 'mime_type': mime_type}
        return attachment_id

    def featured_image(self, post_id):
        return self.posts[post_id]['featured_image']

    def _matches(self, post_id, clause):
        if clause.key == FEATURED_IMAGE_KEY:
            present = self.posts[post_id]['featured_image'] is not None
        else:
            present = clause.key in self.meta[post_id]
        return present if clause.compare == EXISTS else not present

    def query_posts(self, query):
        post_types = query.post_types
        combine = all if query.relation == 'AND' else any
        ids = [
            post_id for post_id in sorted(self.posts, reverse=True)
            if (post_types is None or self.posts[post_id]['post_type'] in post_types)
            and (not query.clauses or combine(self._matches(post_id, c) for c in query.clauses))
        ]
        found = len(ids)
        if query.limit is not None:
            ids = ids[:query.limit]
        return QueryResult(ids=ids, found=found)

    def get_post_meta(self, post_id, key):
        return self.meta.get(post_id, {}).get(key)

    def update_post_meta(self, post_id, key, value):
        if post_id not in self.posts:
            raise KeyError(f"Post {post_id} does not exist")
        self.meta[post_id][key] = str(value)

    def delete_post_meta(self, post_id, key):
        return self.meta.get(post_id, {}).pop(key, None) is not None

    def get_attached_images(self, parent_id, limit=None):
        ids = [
            attachment_id for attachment_id in sorted(self.attachments, reverse=True)
            if self.attachments[attachment_id]['parent'] == parent_id
            and self.attachments[attachment_id]['mime_type'].startswith(IMAGE_MIME_PREFIX)
        ]
        return ids if limit is None else ids[:limit]

    def set_featured_image(self, post_id, attachment_id):
        attachment = self.attachments.get(attachment_id)
        if post_id not in self.posts or attachment is None:
            return 0
        if not attachment['mime_type'].startswith(IMAGE_MIME_PREFIX):
            return 0
        self.posts[post_id]['featured_image'] = attachment_id
        return attachment_id


def get_content_store() -> ContentStore:
    """Build the content store registered by the thumbnails app."""
    config = apps.get_app_config('thumbnails')
    if config.store_class is None:
        raise ImproperlyConfigured(
            f"No content store registered for the thumbnail command "
            f"(POST_THUMBS_CONTENT_STORE={config.store_path!r})"
        )
    return config.store_class()
