import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ProcessedWebhookEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_id', models.CharField(max_length=255, unique=True)),
                ('event_type', models.CharField(max_length=100)),
                ('payment_reference', models.CharField(blank=True, max_length=255)),
                ('outcome', models.CharField(choices=[('applied', 'Applied'), ('no_op', 'Already Applied'), ('unresolved', 'Order Not Resolved')], default='applied', max_length=20)),
                ('processed_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payment_events', to='orders.order')),
            ],
            options={
                'ordering': ['-processed_at'],
            },
        ),
    ]
