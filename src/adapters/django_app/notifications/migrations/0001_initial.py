from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='NotificationModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('recipient_id', models.CharField(max_length=36)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('type', models.CharField(
                    choices=[
                        ('complaint_submitted', 'Complaint submitted'),
                        ('complaint_assigned', 'Complaint assigned'),
                        ('complaint_updated', 'Complaint updated'),
                        ('complaint_resolved', 'Complaint resolved'),
                        ('complaint_rejected', 'Complaint rejected'),
                        ('new_response', 'New response'),
                        ('system', 'System'),
                    ],
                    default='system',
                    max_length=32,
                )),
                ('related_complaint_id', models.CharField(blank=True, max_length=36, null=True)),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Notification',
                'verbose_name_plural': 'Notifications',
                'db_table': 'notifications',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['recipient_id', 'is_read', 'created_at'], name='notifications_inbox_idx'),
                ],
            },
        ),
    ]
