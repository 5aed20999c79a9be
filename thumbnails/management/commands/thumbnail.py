"""
Management command to set featured images on posts from their attached media.

Usage:
    python manage.py thumbnail set                        # process up to 500 posts
    python manage.py thumbnail set --amount=100           # process up to 100 posts
    python manage.py thumbnail set --all --post_type=page # process every page
    python manage.py thumbnail show unset                 # posts left without a thumbnail
    python manage.py thumbnail show multiple              # posts which had several images
    python manage.py thumbnail cleanup                    # remove the bookkeeping metadata
"""
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from thumbnails.services import ThumbnailService
from thumbnails.store import get_content_store


class Command(BaseCommand):
    help = 'Set featured images on posts that have none, using the first attached image'

    def add_arguments(self, parser):
        subparsers = parser.add_subparsers(dest='subcommand', required=True)

        set_parser = subparsers.add_parser(
            'set', help='Attempt to set the featured image on posts without one'
        )
        set_parser.add_argument(
            '--all',
            action='store_true',
            help='Set post thumbnails on all posts in the database',
        )
        set_parser.add_argument(
            '--amount',
            type=int,
            default=None,
            help=f'Number of posts to process (default: {settings.POST_THUMBS_BATCH_SIZE})',
        )
        self._add_post_type_argument(set_parser)

        show_parser = subparsers.add_parser(
            'show', help='List processed posts with no thumbnail or with multiple images'
        )
        show_parser.add_argument(
            'mode',
            choices=ThumbnailService.MODES,
            help='unset: posts left without a thumbnail, multiple: posts which had several images',
        )
        self._add_post_type_argument(show_parser)

        cleanup_parser = subparsers.add_parser(
            'cleanup', help='Delete metadata saved to posts processed by this command'
        )
        cleanup_parser.add_argument(
            '--post_type', '--post-type',
            dest='post_type',
            default=None,
            help='Only clean up posts of this type (default: every type)',
        )

    @staticmethod
    def _add_post_type_argument(parser):
        parser.add_argument(
            '--post_type', '--post-type',
            dest='post_type',
            default=None,
            help=f'The post type to query (default: {settings.POST_THUMBS_DEFAULT_POST_TYPE})',
        )

    def handle(self, *args, **options):
        try:
            service = ThumbnailService(
                get_content_store(),
                attachment_limit=settings.POST_THUMBS_ATTACHMENT_LIMIT,
            )
        except ImproperlyConfigured as e:
            raise CommandError(str(e)) from e

        subcommand = options['subcommand']
        try:
            if subcommand == 'set':
                self.set_thumbnails(service, options)
            elif subcommand == 'show':
                self.show(service, options)
            else:
                self.cleanup(service, options)
        except Exception as e:
            self.stderr.write(self.style.ERROR(f'Error running thumbnail {subcommand}: {e}'))
            raise

    def get_post_type(self, options):
        return options.get('post_type') or settings.POST_THUMBS_DEFAULT_POST_TYPE

    def get_quantity(self, options):
        """Number of posts to process, None meaning all of them."""
        if options.get('all'):
            return None
        if options.get('amount') is not None:
            # The query layer treats a page size of 0 as 1
            return abs(options['amount']) or 1
        return settings.POST_THUMBS_BATCH_SIZE

    def set_thumbnails(self, service, options):
        post_type = self.get_post_type(options)
        quantity = self.get_quantity(options)

        query = service.query_posts_with_metadata(post_type, quantity)
        if query.post_count == 0:
            self.stdout.write(self.style.SUCCESS('All post thumbnails have been processed.'))
            return

        self.stdout.write(f'Processing {query.post_count} posts...')
        results = service.process_posts(query.ids)

        self.stdout.write(self.style.SUCCESS(
            f"Done. Processed: {results['processed']} | "
            f"Featured images set: {results['assigned']} | "
            f"No image found: {results['unset']}"
        ))

    def show(self, service, options):
        mode = options['mode']
        ids = service.show(mode, self.get_post_type(options))

        if mode == ThumbnailService.MODE_MULTIPLE:
            if not ids:
                self.stdout.write(self.style.SUCCESS(
                    'No processed posts found containing multiple available options for featured images.'
                ))
            else:
                self.stdout.write(self.style.SUCCESS('Located the following processed posts with multiple images:'))
                self.stdout.write('Post IDs: ' + ', '.join(str(post_id) for post_id in ids))
            return

        if not ids:
            self.stdout.write(self.style.SUCCESS(
                'All processed posts have thumbnails, but there may still be additional posts to process.'
            ))
            return

        self.stdout.write(self.style.SUCCESS('Located processed posts which contain no thumbnails:'))
        self.stdout.write('Post IDs: ' + ', '.join(str(post_id) for post_id in ids))

    def cleanup(self, service, options):
        count = service.cleanup(options.get('post_type'))

        if count == 0:
            self.stdout.write(self.style.SUCCESS('No posts found with set-post-thumbs meta. Exiting.'))
            return

        post_phrase = 'post' if count == 1 else 'posts'
        self.stdout.write(self.style.SUCCESS(f'Deleted metadata from {count} {post_phrase}.'))
