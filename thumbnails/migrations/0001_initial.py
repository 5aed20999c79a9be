import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Post',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(blank=True, default='', max_length=500)),
                ('post_type', models.CharField(db_index=True, default='post', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Attachment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(blank=True, default='', max_length=500)),
                ('file_url', models.URLField(blank=True, default='', max_length=1000)),
                ('mime_type', models.CharField(default='image/jpeg', max_length=100)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('post', models.ForeignKey(blank=True, help_text='Parent post; empty for unattached media', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='attachments', to='thumbnails.post')),
            ],
            options={
                'ordering': ['-uploaded_at', '-id'],
            },
        ),
        migrations.AddField(
            model_name='post',
            name='featured_image',
            field=models.ForeignKey(blank=True, help_text='Representative image for this post', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='featured_on', to='thumbnails.attachment'),
        ),
        migrations.AddIndex(
            model_name='post',
            index=models.Index(fields=['post_type', '-created_at'], name='post_type_created_idx'),
        ),
        migrations.CreateModel(
            name='PostMeta',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(db_index=True, max_length=255)),
                ('value', models.TextField(blank=True, default='')),
                ('post', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meta', to='thumbnails.post')),
            ],
            options={
                'verbose_name': 'Post meta',
                'verbose_name_plural': 'Post meta',
                'ordering': ['post', 'key'],
            },
        ),
        migrations.AddConstraint(
            model_name='postmeta',
            constraint=models.UniqueConstraint(fields=('post', 'key'), name='unique_post_meta_key'),
        ),
    ]
