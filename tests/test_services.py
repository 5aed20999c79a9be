"""
Tests for ThumbnailService against the in-memory content store.
"""
import pytest

from thumbnails.services import ThumbnailService
from thumbnails.store import InMemoryContentStore

NO_THUMBNAIL = ThumbnailService.META_KEY_NO_THUMBNAIL
MULTIPLE = ThumbnailService.META_KEY_MULTIPLE_IMAGES


def flags(store, post_id):
    return {key for key in (NO_THUMBNAIL, MULTIPLE) if store.get_post_meta(post_id, key) is not None}


class TestSetThumbnails:

    def test_post_without_images_is_flagged(self, store, service):
        post_id = store.add_post()

        results = service.set_thumbnails()

        assert results == {'processed': 1, 'assigned': 0, 'unset': 1}
        assert store.get_post_meta(post_id, NO_THUMBNAIL) == 'true'
        assert store.featured_image(post_id) is None

    def test_single_image_becomes_featured_image(self, store, service):
        post_id = store.add_post()
        image_id = store.add_attachment(post_id)

        results = service.set_thumbnails()

        assert results == {'processed': 1, 'assigned': 1, 'unset': 0}
        assert store.featured_image(post_id) == image_id
        assert flags(store, post_id) == set()

    def test_multiple_images_are_recorded_and_last_candidate_wins(self, store, wide_service):
        post_id = store.add_post()
        oldest = store.add_attachment(post_id)
        middle = store.add_attachment(post_id)
        newest = store.add_attachment(post_id)

        wide_service.set_thumbnails()

        assert store.get_post_meta(post_id, MULTIPLE) == f'{newest},{middle},{oldest}'
        assert store.featured_image(post_id) == oldest
        assert store.get_post_meta(post_id, NO_THUMBNAIL) is None

    def test_default_limit_never_detects_multiple_images(self, store, service):
        post_id = store.add_post()
        store.add_attachment(post_id)
        newest = store.add_attachment(post_id)

        service.set_thumbnails()

        # Only one attachment is fetched, so the multiple-images flag is never written
        assert store.get_post_meta(post_id, MULTIPLE) is None
        assert store.featured_image(post_id) == newest

    def test_non_image_attachments_are_ignored(self, store, service):
        post_id = store.add_post()
        store.add_attachment(post_id, mime_type='application/pdf')

        service.set_thumbnails()

        assert store.featured_image(post_id) is None
        assert store.get_post_meta(post_id, NO_THUMBNAIL) == 'true'

    def test_posts_with_featured_image_are_skipped(self, store, service):
        post_id = store.add_post()
        image_id = store.add_attachment(post_id)
        store.set_featured_image(post_id, image_id)

        results = service.set_thumbnails()

        assert results['processed'] == 0
        assert flags(store, post_id) == set()

    def test_quantity_limits_batch_to_newest_posts(self, store, service):
        older = store.add_post()
        newer = store.add_post()

        results = service.set_thumbnails(quantity=1)

        assert results['processed'] == 1
        assert store.get_post_meta(newer, NO_THUMBNAIL) == 'true'
        assert store.get_post_meta(older, NO_THUMBNAIL) is None

    def test_unbounded_quantity_processes_everything(self, store, service):
        post_ids = [store.add_post() for _ in range(5)]

        results = service.set_thumbnails(quantity=None)

        assert results['processed'] == 5
        assert all(store.get_post_meta(post_id, NO_THUMBNAIL) for post_id in post_ids)

    def test_only_requested_post_type_is_processed(self, store, service):
        post_id = store.add_post('post')
        page_id = store.add_post('page')

        service.set_thumbnails(post_type='page')

        assert store.get_post_meta(page_id, NO_THUMBNAIL) == 'true'
        assert store.get_post_meta(post_id, NO_THUMBNAIL) is None

    def test_second_run_finds_nothing_to_do(self, store, service):
        empty = store.add_post()
        with_image = store.add_post()
        image_id = store.add_attachment(with_image)

        service.set_thumbnails()
        before = (store.featured_image(with_image), flags(store, empty), flags(store, with_image))
        results = service.set_thumbnails()

        assert results == {'processed': 0, 'assigned': 0, 'unset': 0}
        after = (store.featured_image(with_image), flags(store, empty), flags(store, with_image))
        assert after == before == (image_id, {NO_THUMBNAIL}, set())

    def test_failed_assignment_is_flagged(self, store, service, monkeypatch):
        post_id = store.add_post()
        store.add_attachment(post_id)
        monkeypatch.setattr(store, 'set_featured_image', lambda post_id, attachment_id: 0)

        results = service.set_thumbnails()

        assert results['unset'] == 1
        assert store.get_post_meta(post_id, NO_THUMBNAIL) == 'true'

    def test_store_errors_propagate(self, store, service, monkeypatch):
        store.add_post()

        def broken(*args, **kwargs):
            raise RuntimeError('database is locked')

        monkeypatch.setattr(store, 'update_post_meta', broken)

        with pytest.raises(RuntimeError, match='database is locked'):
            service.set_thumbnails()


class TestShow:

    def test_unset_lists_exactly_the_flagged_posts(self, store, service):
        empty_ids = [store.add_post() for _ in range(3)]
        with_image = store.add_post()
        store.add_attachment(with_image)

        service.set_thumbnails()

        assert sorted(service.show('unset')) == sorted(empty_ids)

    def test_multiple_lists_posts_with_several_candidates(self, store, wide_service):
        single = store.add_post()
        store.add_attachment(single)
        several = store.add_post()
        store.add_attachment(several)
        store.add_attachment(several)

        wide_service.set_thumbnails()

        assert wide_service.show('multiple') == [several]
        assert wide_service.show('unset') == []

    def test_show_is_scoped_to_post_type(self, store, service):
        store.add_post('page')
        service.set_thumbnails(post_type='page')

        assert service.show('unset', post_type='post') == []
        assert len(service.show('unset', post_type='page')) == 1

    def test_unknown_mode_is_rejected(self, service):
        with pytest.raises(ValueError, match='Unknown mode'):
            service.show('everything')

    def test_show_does_not_mutate(self, store, service):
        post_id = store.add_post()

        service.show('unset')
        service.show('multiple')

        assert flags(store, post_id) == set()
        assert store.featured_image(post_id) is None


class TestCleanup:

    def test_cleanup_removes_both_flags(self, store, wide_service):
        empty = store.add_post()
        several = store.add_post()
        store.add_attachment(several)
        store.add_attachment(several)
        wide_service.set_thumbnails()

        count = wide_service.cleanup()

        assert count == 2
        assert flags(store, empty) == set()
        assert flags(store, several) == set()
        assert wide_service.query_posts_with_command_meta().post_count == 0

    def test_cleanup_covers_every_post_type_by_default(self, store, service):
        store.add_post('post')
        store.add_post('page')
        service.set_thumbnails(post_type='post')
        service.set_thumbnails(post_type='page')

        assert service.cleanup() == 2

    def test_cleanup_can_be_scoped_to_post_type(self, store, service):
        post_id = store.add_post('post')
        page_id = store.add_post('page')
        service.set_thumbnails(post_type='post')
        service.set_thumbnails(post_type='page')

        assert service.cleanup(post_type='page') == 1
        assert flags(store, page_id) == set()
        assert flags(store, post_id) == {NO_THUMBNAIL}

    def test_cleanup_with_nothing_flagged(self, store, service):
        store.add_post()
        assert service.cleanup() == 0

    def test_cleanup_leaves_other_meta_alone(self, store, service):
        post_id = store.add_post()
        store.update_post_meta(post_id, 'seo-title', 'Hello')
        service.set_thumbnails()

        service.cleanup()

        assert store.get_post_meta(post_id, 'seo-title') == 'Hello'


def test_post_42_round_trip():
    store = InMemoryContentStore()
    service = ThumbnailService(store)
    store.add_post(post_id=42)

    service.set_thumbnails()
    assert store.get_post_meta(42, NO_THUMBNAIL) == 'true'
    assert service.show('unset') == [42]

    service.cleanup()
    assert service.show('unset') == []
