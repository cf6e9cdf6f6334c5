from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('tasks', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='task',
            name='alarm',
            field=models.JSONField(blank=True, help_text='Alarm start: an offset such as {"hours": 2} from the period start, or a time of day keyed by "daily", a weekday, a day of month or "all"', null=True),
        ),
    ]
