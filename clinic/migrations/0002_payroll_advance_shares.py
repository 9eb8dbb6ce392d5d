from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('clinic', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='payroll',
            name='advance_shares',
            field=models.JSONField(blank=True, default=dict, help_text='advance id -> amount deducted'),
        ),
        migrations.AddField(
            model_name='payroll',
            name='repaid_at',
            field=models.DateTimeField(blank=True, null=True),
        ),
    ]
