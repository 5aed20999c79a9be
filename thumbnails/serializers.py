"""
REST API serializers for thumbnails app.
"""
from rest_framework import serializers
from thumbnails.models import Post


class PostSerializer(serializers.ModelSerializer):
    """Serializer for Post model."""

    attachment_count = serializers.IntegerField(source='attachments.count', read_only=True)

    class Meta:
        model = Post
        fields = [
            'id', 'title', 'post_type', 'featured_image', 'attachment_count',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ProcessedPostsSerializer(serializers.Serializer):
    """Report of processed post IDs for one mode."""

    mode = serializers.CharField()
    post_type = serializers.CharField()
    ids = serializers.ListField(child=serializers.IntegerField())
    count = serializers.SerializerMethodField()

    def get_count(self, obj):
        return len(obj['ids'])
