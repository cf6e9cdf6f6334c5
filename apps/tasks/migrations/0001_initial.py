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
            name='Task',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('step', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed')], db_index=True, default='pending', max_length=15)),
                ('status', models.BooleanField(db_index=True, default=True, help_text='Only active tasks are checked for timeouts')),
                ('controller', models.CharField(blank=True, help_text='Controller user id, user name or email (never notified)', max_length=255)),
                ('users', models.TextField(blank=True, help_text='Assignee ids, e.g. [2, 3]')),
                ('period_start', models.DateField(blank=True, null=True)),
                ('period_end', models.DateField(blank=True, null=True)),
                ('period_type', models.CharField(choices=[('none', 'None'), ('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly'), ('yearly', 'Yearly')], default='none', max_length=10)),
                ('period_days', models.JSONField(blank=True, default=list, help_text='Weekday names (weekly), day numbers (monthly) or dates (yearly); empty = every day')),
                ('time_cloture', models.TimeField(blank=True, help_text='Time of day the task window closes', null=True)),
                ('time_out', models.TimeField(blank=True, help_text='Time of day the task becomes overdue', null=True)),
                ('rest_time', models.TimeField(blank=True, help_text='Length of one rest, as HH:MM:SS', null=True)),
                ('rest_max', models.PositiveIntegerField(default=0, help_text='Number of rests each assignee may take')),
                ('timeout_notified_at', models.DateTimeField(blank=True, help_text='When the timeout notification was sent for the current cycle', null=True)),
                ('timeout_cycle_at', models.DateTimeField(blank=True, help_text='Deadline of the cycle the notification belongs to', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this task (never notified)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_tasks', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'task',
                'verbose_name_plural': 'tasks',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'timeout_notified_at'], name='tasks_status_notified_idx'),
                    models.Index(fields=['period_start', 'period_end'], name='tasks_period_idx'),
                ],
            },
        ),
    ]
