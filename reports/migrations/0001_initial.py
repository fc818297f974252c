import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Report',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('report_type', models.CharField(choices=[('financial_summary', 'Financial Summary'), ('community_activity', 'Community Activity'), ('participant_demographics', 'Participant Demographics'), ('program_impact', 'Program Impact')], max_length=50)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('processing', 'Processing'), ('completed', 'Completed'), ('failed', 'Failed')], db_index=True, default='pending', max_length=20)),
                ('filters', models.JSONField(blank=True, default=dict, help_text='Filters used for the report, e.g. dates and community')),
                ('output_location', models.CharField(blank=True, default='', help_text='Where the generated file can be downloaded', max_length=500)),
                ('output_key', models.CharField(blank=True, default='', help_text='Storage key of the generated file', max_length=255)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('job_id', models.CharField(blank=True, help_text='RQ Job ID', max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('requested_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reports', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
