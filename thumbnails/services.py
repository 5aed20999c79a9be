"""
Service that assigns featured images to posts from their attached media.
"""
import logging
from typing import Dict, List, Optional

from thumbnails.store import (
    EXISTS,
    FEATURED_IMAGE_KEY,
    NOT_EXISTS,
    ContentStore,
    MetaClause,
    PostQuery,
    QueryResult,
)

logger = logging.getLogger(__name__)


class ThumbnailService:
    """
    Sets featured images on posts that do not have one yet.

    Can be used as is, or subclassed to alter the queries or the way a
    featured image is picked.
    """

    # Saved to posts which have been processed and have no thumbnail
    META_KEY_NO_THUMBNAIL = 'set-post-thumbs--no-thumbnail'

    # Saved to posts where multiple images were available to choose from
    META_KEY_MULTIPLE_IMAGES = 'set-post-thumbs--multiple-images'

    # Number of posts processed when no amount is given
    DEFAULT_POSTS_PER_PAGE = 500

    MODE_UNSET = 'unset'
    MODE_MULTIPLE = 'multiple'
    MODES = (MODE_UNSET, MODE_MULTIPLE)

    def __init__(self, store: ContentStore, attachment_limit: Optional[int] = 1):
        self.store = store
        self.attachment_limit = attachment_limit

    def set_thumbnails(self, post_type: str = 'post',
                       quantity: Optional[int] = DEFAULT_POSTS_PER_PAGE) -> Dict[str, int]:
        """
        Attempt to set the featured image on a batch of unprocessed posts.

        Args:
            post_type: The post type to query
            quantity: Number of posts to process, None for all of them

        Returns:
            Dict with processed, assigned and unset counts
        """
        query = self.query_posts_with_metadata(post_type, quantity)

        if query.post_count == 0:
            logger.info(f"[thumbnail] No unprocessed {post_type} posts without a featured image")
        else:
            logger.info(f"[thumbnail] Processing {query.post_count} of {query.found} {post_type} posts")

        return self.process_posts(query.ids)

    def process_posts(self, post_ids: List[int]) -> Dict[str, int]:
        """Set featured images on the given posts, flagging those left without one."""
        results = {'processed': 0, 'assigned': 0, 'unset': 0}

        for post_id in post_ids:
            attachment_id = self.maybe_set_featured_image(post_id)

            if not attachment_id:
                self.store.update_post_meta(post_id, self.META_KEY_NO_THUMBNAIL, 'true')
                results['unset'] += 1
                logger.debug(f"[thumbnail] Post {post_id}: no image found")
            else:
                results['assigned'] += 1
                logger.debug(f"[thumbnail] Post {post_id}: featured image set to {attachment_id}")

            results['processed'] += 1

        return results

    def show(self, mode: str, post_type: str = 'post') -> List[int]:
        """
        List processed post IDs.

        Args:
            mode: 'unset' for posts left without a thumbnail, 'multiple' for
                posts which had several images to choose from
            post_type: The post type to query
        """
        if mode not in self.MODES:
            raise ValueError(f"Unknown mode {mode!r}, expected one of: {', '.join(self.MODES)}")

        query = self.query_posts_with_metadata(
            post_type,
            quantity=None,
            processed=True,
            multiple=(mode == self.MODE_MULTIPLE),
        )
        return query.ids

    def cleanup(self, post_type: Optional[str] = None) -> int:
        """
        Delete metadata saved to posts processed by this service.

        Returns:
            Number of posts the metadata was removed from
        """
        query = self.query_posts_with_command_meta(post_type)

        for post_id in query.ids:
            self.store.delete_post_meta(post_id, self.META_KEY_MULTIPLE_IMAGES)
            self.store.delete_post_meta(post_id, self.META_KEY_NO_THUMBNAIL)

        logger.info(f"[thumbnail] Deleted metadata from {query.post_count} posts")
        return query.post_count

    def query_posts_with_metadata(self, post_type, quantity: Optional[int] = DEFAULT_POSTS_PER_PAGE,
                                  processed: bool = False, multiple: bool = False) -> QueryResult:
        """
        Locate posts by featured image and processing state.

        Unprocessed posts have neither a featured image nor the no-thumbnail
        flag. With `processed`, posts carrying the flag are returned instead.
        With `multiple`, posts with a featured image and the multiple-images
        flag are matched.
        """
        return self.store.query_posts(PostQuery(
            post_type=post_type,
            limit=quantity,
            relation='AND',
            clauses=[
                MetaClause(FEATURED_IMAGE_KEY, EXISTS if multiple else NOT_EXISTS),
                MetaClause(
                    self.META_KEY_MULTIPLE_IMAGES if multiple else self.META_KEY_NO_THUMBNAIL,
                    EXISTS if processed else NOT_EXISTS,
                ),
            ],
        ))

    def query_posts_with_command_meta(self, post_type: Optional[str] = None) -> QueryResult:
        """Locate posts carrying either flag written by this service."""
        return self.store.query_posts(PostQuery(
            post_type=post_type,
            limit=None,
            relation='OR',
            clauses=[
                MetaClause(self.META_KEY_NO_THUMBNAIL, EXISTS),
                MetaClause(self.META_KEY_MULTIPLE_IMAGES, EXISTS),
            ],
        ))

    def maybe_set_featured_image(self, post_id: int) -> int:
        """
        Set the featured image from the post's attached images.

        When several candidates are fetched, all of them are recorded under
        the multiple-images flag for manual review and the last one is used.
        Only `attachment_limit` images are fetched, so with the default of 1
        that branch is never taken.

        Returns:
            The assigned attachment ID, or 0 when nothing was assigned
        """
        attachment_ids = self.store.get_attached_images(post_id, limit=self.attachment_limit)

        if not attachment_ids:
            return 0

        if len(attachment_ids) > 1:
            candidates = ','.join(str(attachment_id) for attachment_id in attachment_ids)
            self.store.update_post_meta(post_id, self.META_KEY_MULTIPLE_IMAGES, candidates)
            logger.info(f"[thumbnail] Post {post_id} has multiple images: {candidates}")

        return self.store.set_featured_image(post_id, attachment_ids[-1])
