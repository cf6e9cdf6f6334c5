import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('notifications', '0001_initial'),
        ('tasks', '0002_task_alarm'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AlterField(
            model_name='notificationtimeout',
            name='notification_type',
            field=models.CharField(choices=[('start_time', 'Start Time'), ('timeout_repeat', 'Timeout Repeat'), ('delay_repeat_alarm', 'Delay Repeat Alarm')], db_index=True, default='start_time', max_length=20),
        ),
        migrations.AddField(
            model_name='notificationtimeout',
            name='next_at',
            field=models.DateTimeField(blank=True, db_index=True, help_text='When the next timeout reminder is due', null=True),
        ),
        migrations.AddField(
            model_name='notificationtimeout',
            name='rest_max',
            field=models.PositiveIntegerField(default=0, help_text='Number of timeout reminders allowed'),
        ),
        migrations.AddField(
            model_name='notificationtimeout',
            name='repeat_count',
            field=models.PositiveIntegerField(default=0, help_text='Timeout reminders sent before this row'),
        ),
        migrations.CreateModel(
            name='AlarmNotification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.TextField(blank=True)),
                ('next_at', models.DateTimeField(blank=True, db_index=True, help_text='When the next alarm is due; empty once the alarm is done', null=True)),
                ('rest_max', models.PositiveIntegerField(default=0, help_text='Number of alarms to send')),
                ('notification_count', models.PositiveIntegerField(default=0)),
                ('cycle_at', models.DateTimeField(blank=True, help_text='Alarm start time the row was created for', null=True)),
                ('read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='alarm_notifications', to='tasks.task')),
                ('user', models.ForeignKey(help_text='Recipient', on_delete=django.db.models.deletion.CASCADE, related_name='alarm_notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'alarm notification',
                'verbose_name_plural': 'alarm notifications',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['task', 'user'], name='alarm_task_user_idx'), models.Index(fields=['task', 'cycle_at'], name='alarm_task_cycle_idx')],
            },
        ),
    ]
