import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('booking_date', models.DateField(db_index=True)),
                ('period', models.CharField(choices=[('morning', 'Morning'), ('evening', 'Evening'), ('both', 'Both')], max_length=10)),
                ('customer_name', models.CharField(max_length=255)),
                ('customer_phone', models.CharField(max_length=50)),
                ('amount_paid', models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ('amount_remaining', models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ('people_count', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(60)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'bookings_booking',
                'ordering': ['booking_date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='BookingDay',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(unique=True)),
            ],
            options={
                'db_table': 'bookings_day',
            },
        ),
    ]
