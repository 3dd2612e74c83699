from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('logistics', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='dispatchconfig',
            name='offer_timeout',
            field=models.PositiveIntegerField(default=10, help_text='Seconds per courier offer'),
        ),
    ]
