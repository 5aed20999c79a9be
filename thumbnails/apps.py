from django.apps import AppConfig
import logging

logger = logging.getLogger(__name__)


class ThumbnailsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'thumbnails'
    verbose_name = 'Post thumbnails'

    store_path = None
    store_class = None

    def ready(self):
        """Register the content store used by the `thumbnail` command.

        Registration is best effort: if the configured store cannot be
        imported the error is logged and Django keeps starting up, so every
        other command and the web app remain usable.
        """
        from django.conf import settings
        from django.utils.module_loading import import_string

        self.store_path = getattr(
            settings, 'POST_THUMBS_CONTENT_STORE', 'thumbnails.store.DjangoContentStore'
        )
        try:
            self.store_class = import_string(self.store_path)
        except Exception as e:
            self.store_class = None
            logger.error(f"[thumbnail] Failed to register content store {self.store_path!r}: {e}")
