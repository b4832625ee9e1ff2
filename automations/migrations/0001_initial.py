# Initial schema for messaging automations

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # MessageTemplate
        migrations.CreateModel(
            name='MessageTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True)),
                ('description', models.TextField(blank=True)),
                ('subject', models.CharField(blank=True, max_length=500)),
                ('content', models.TextField(blank=True)),
                ('category', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Message Template',
                'verbose_name_plural': 'Message Templates',
                'ordering': ['name'],
            },
        ),

        # AutomationRule
        migrations.CreateModel(
            name='AutomationRule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('trigger', models.CharField(choices=[
                    ('application_received', 'Application Received'),
                    ('interview_scheduled', 'Interview Scheduled'),
                    ('interview_reminder', 'Interview Reminder'),
                    ('interview_completed', 'Interview Completed'),
                    ('interview_cancelled', 'Interview Cancelled'),
                    ('interview_rescheduled', 'Interview Rescheduled'),
                    ('interview_updated', 'Interview Updated'),
                    ('candidate_accepted', 'Candidate Accepted'),
                    ('candidate_rejected', 'Candidate Rejected'),
                    ('offer_sent', 'Offer Sent'),
                    ('welcome_new_hire', 'Welcome New Hire'),
                ], db_index=True, max_length=50)),
                ('channel', models.CharField(choices=[('email', 'Email'), ('sms', 'SMS'), ('in_app', 'In-app notification')], max_length=20)),
                ('content_mode', models.CharField(choices=[('template', 'Template'), ('custom', 'Custom')], max_length=20)),
                ('subject', models.CharField(blank=True, max_length=500)),
                ('body', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], db_index=True, default='active', max_length=20)),
                ('last_run_at', models.DateTimeField(blank=True, null=True)),
                ('sent_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='automation_rules', to=settings.AUTH_USER_MODEL)),
                ('template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='automation_rules', to='automations.messagetemplate')),
            ],
            options={
                'verbose_name': 'Automation Rule',
                'verbose_name_plural': 'Automation Rules',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['trigger', 'status'], name='automations_trigger_status_idx')],
                'constraints': [models.CheckConstraint(
                    condition=(
                        models.Q(('content_mode', 'template'), ('template__isnull', False))
                        | models.Q(('content_mode', 'custom'), ('template__isnull', True))
                    ),
                    name='automations_rule_content_matches_mode',
                )],
            },
        ),
    ]
