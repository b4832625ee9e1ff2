# Delivery history for real automation runs

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    dependencies = [
        ('automations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SentMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
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
                ], max_length=50)),
                ('channel', models.CharField(choices=[('email', 'Email'), ('sms', 'SMS'), ('in_app', 'In-app notification')], max_length=20)),
                ('recipient', models.CharField(max_length=255)),
                ('subject', models.CharField(blank=True, max_length=500)),
                ('body', models.TextField(blank=True)),
                ('external_id', models.CharField(blank=True, max_length=255)),
                ('sent_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('rule', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_messages', to='automations.automationrule')),
                ('template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_messages', to='automations.messagetemplate')),
            ],
            options={
                'verbose_name': 'Sent Message',
                'verbose_name_plural': 'Sent Messages',
                'ordering': ['-sent_at'],
                'indexes': [models.Index(fields=['rule', '-sent_at'], name='automations_sent_rule_idx')],
            },
        ),
    ]
