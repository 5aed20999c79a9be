"""
Django models for posts, their attached media and post metadata.
"""
from django.db import models


class Post(models.Model):
    """A content record that may carry a featured image."""

    title = models.CharField(max_length=500, blank=True, default='')
    post_type = models.CharField(max_length=20, default='post', db_index=True)
    featured_image = models.ForeignKey(
        'Attachment',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='featured_on',
        help_text="Representative image for this post"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['post_type', '-created_at'], name='post_type_created_idx'),
        ]

    def __str__(self):
        return self.title or f'{self.post_type} #{self.pk}'


class Attachment(models.Model):
    """A media record, optionally attached to a parent post."""

    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        blank=True,
        null=True,
        related_name='attachments',
        help_text="Parent post; empty for unattached media"
    )
    title = models.CharField(max_length=500, blank=True, default='')
    file_url = models.URLField(max_length=1000, blank=True, default='')
    mime_type = models.CharField(max_length=100, default='image/jpeg')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        # Host default ordering for attached media lookups
        ordering = ['-uploaded_at', '-id']

    def __str__(self):
        return self.title or f'attachment #{self.pk}'


class PostMeta(models.Model):
    """Key/value metadata attached to a post."""

    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='meta')
    key = models.CharField(max_length=255, db_index=True)
    value = models.TextField(blank=True, default='')

    class Meta:
        ordering = ['post', 'key']
        verbose_name = 'Post meta'
        verbose_name_plural = 'Post meta'
        constraints = [
            models.UniqueConstraint(fields=['post', 'key'], name='unique_post_meta_key'),
        ]

    def __str__(self):
        return f'{self.post_id}: {self.key}={self.value}'
