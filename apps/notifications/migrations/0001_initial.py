import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tasks', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Delay',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rest_time', models.TimeField(blank=True, help_text='Length of one rest, copied from the task', null=True)),
                ('rest_max', models.PositiveIntegerField(default=0, help_text='Rests remaining for this user')),
                ('next_alarm_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('alarm_count', models.PositiveIntegerField(default=0)),
                ('last_alarm_at', models.DateTimeField(blank=True, null=True)),
                ('cycle_at', models.DateTimeField(blank=True, help_text='Deadline of the cycle the allowance was granted for', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='delays', to='tasks.task')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='task_delays', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'delay',
                'verbose_name_plural': 'delays',
                'ordering': ['-updated_at'],
                'indexes': [
                    models.Index(fields=['task', 'user'], name='delay_task_user_idx'),
                    models.Index(fields=['task', 'rest_max'], name='delay_task_rest_max_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='NotificationTimeout',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notification_type', models.CharField(choices=[('start_time', 'Start Time'), ('delay_repeat_alarm', 'Delay Repeat Alarm')], db_index=True, default='start_time', max_length=20)),
                ('description', models.TextField(help_text='Human-readable record of what was sent')),
                ('read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='timeout_notifications', to='tasks.task')),
                ('user', models.ForeignKey(help_text='Recipient', on_delete=django.db.models.deletion.CASCADE, related_name='timeout_notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'timeout notification',
                'verbose_name_plural': 'timeout notifications',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['task', 'user'], name='ntimeout_task_user_idx'),
                    models.Index(fields=['user', '-created_at'], name='ntimeout_user_created_idx'),
                ],
            },
        ),
    ]
