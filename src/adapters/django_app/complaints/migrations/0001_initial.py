"""
Initial migration of the Complaints domain.

Creates the tables:
- categories: category catalog
- members: member directory
- complaints: complaint aggregate
- ticket_sequences: ticket id counters
- domain_events: event store
"""

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='CategoryModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100, unique=True)),
                ('description', models.CharField(blank=True, default='', max_length=500)),
                ('icon', models.CharField(default='📋', max_length=16)),
                ('color', models.CharField(default='#6366f1', max_length=16)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('complaint_count', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'db_table': 'categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='MemberModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('role', models.CharField(
                    choices=[('student', 'Student'), ('staff', 'Staff'), ('admin', 'Admin')],
                    db_index=True,
                    default='student',
                    max_length=16,
                )),
                ('department', models.CharField(blank=True, default='', max_length=100)),
                ('student_id', models.CharField(blank=True, default='', max_length=50)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Member',
                'verbose_name_plural': 'Members',
                'db_table': 'members',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ComplaintModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('ticket_id', models.CharField(max_length=32, unique=True)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('category_id', models.CharField(db_index=True, max_length=36)),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('in-review', 'In review'),
                        ('in-progress', 'In progress'),
                        ('resolved', 'Resolved'),
                        ('rejected', 'Rejected'),
                        ('closed', 'Closed'),
                    ],
                    db_index=True,
                    default='pending',
                    max_length=20,
                )),
                ('priority', models.CharField(
                    choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')],
                    db_index=True,
                    default='medium',
                    max_length=10,
                )),
                ('submitted_by', models.CharField(db_index=True, max_length=36)),
                ('assigned_to', models.CharField(blank=True, db_index=True, max_length=36, null=True)),
                ('is_anonymous', models.BooleanField(default=False)),
                ('attachments', models.JSONField(blank=True, default=list)),
                ('responses', models.JSONField(blank=True, default=list)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True, null=True)),
                ('satisfaction_rating', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('satisfaction_feedback', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Complaint',
                'verbose_name_plural': 'Complaints',
                'db_table': 'complaints',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'priority', 'category_id'], name='complaints_filter_idx'),
                    models.Index(fields=['assigned_to', 'status'], name='complaints_assignee_idx'),
                    models.Index(fields=['submitted_by', 'created_at'], name='complaints_submitter_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TicketSequenceModel',
            fields=[
                ('name', models.CharField(max_length=32, primary_key=True, serialize=False)),
                ('value', models.BigIntegerField(default=0)),
            ],
            options={
                'db_table': 'ticket_sequences',
            },
        ),
        migrations.CreateModel(
            name='DomainEventModel',
            fields=[
                ('event_id', models.CharField(max_length=36, primary_key=True, serialize=False)),
                ('event_type', models.CharField(db_index=True, max_length=100)),
                ('aggregate_type', models.CharField(db_index=True, max_length=100)),
                ('aggregate_id', models.CharField(db_index=True, max_length=36)),
                ('event_data', models.JSONField(default=dict)),
                ('version', models.IntegerField(default=1)),
                ('sequence', models.BigIntegerField(default=0)),
                ('occurred_at', models.DateTimeField()),
                ('recorded_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Domain Event',
                'verbose_name_plural': 'Domain Events',
                'db_table': 'domain_events',
                'ordering': ['recorded_at'],
                'indexes': [
                    models.Index(fields=['aggregate_id', 'sequence'], name='events_aggregate_seq_idx'),
                    models.Index(fields=['event_type', 'recorded_at'], name='events_type_recorded_idx'),
                ],
            },
        ),
    ]
