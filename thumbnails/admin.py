"""
Django admin configuration for thumbnails app.
"""
from django.contrib import admin
from .models import Attachment, Post, PostMeta


class AttachmentInline(admin.TabularInline):
    model = Attachment
    fk_name = 'post'
    fields = ['title', 'file_url', 'mime_type', 'uploaded_at']
    readonly_fields = ['uploaded_at']
    extra = 0


class PostMetaInline(admin.TabularInline):
    model = PostMeta
    fields = ['key', 'value']
    extra = 0


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    """Admin interface for Post model."""

    list_display = ['id', 'title', 'post_type', 'featured_image', 'created_at']
    list_filter = ['post_type', 'created_at']
    search_fields = ['title']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['featured_image']
    list_per_page = 50
    inlines = [AttachmentInline, PostMetaInline]


@admin.register(Attachment)
class AttachmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'post', 'mime_type', 'uploaded_at']
    list_filter = ['mime_type']
    search_fields = ['title', 'file_url']
    raw_id_fields = ['post']


@admin.register(PostMeta)
class PostMetaAdmin(admin.ModelAdmin):
    list_display = ['post', 'key', 'value']
    list_filter = ['key']
    search_fields = ['key', 'value']
    raw_id_fields = ['post']
