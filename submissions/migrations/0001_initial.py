# Generated initial migration for submission models

import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models
from django.db.models import JSONField


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Submission',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tracking_code', models.CharField(editable=False, max_length=32, unique=True)),
                ('nama', models.CharField(max_length=255)),
                ('nik', models.CharField(editable=False, max_length=16, validators=[django.core.validators.RegexValidator('^[0-9]{16}$', 'NIK harus 16 digit angka')])),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('no_wa', models.CharField(max_length=20)),
                ('jenis_layanan', models.CharField(choices=[('KTP', 'KTP'), ('KK', 'KK'), ('AKTA', 'AKTA'), ('SKCK', 'SKCK'), ('SURAT_PINDAH', 'SURAT_PINDAH'), ('SURAT_KETERANGAN', 'SURAT_KETERANGAN')], max_length=32)),
                ('status', models.CharField(choices=[('PENGAJUAN_BARU', 'PENGAJUAN_BARU'), ('DIPROSES', 'DIPROSES'), ('SELESAI', 'SELESAI'), ('DITOLAK', 'DITOLAK')], default='PENGAJUAN_BARU', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'submissions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='submissions_status_1c6f0e_idx'),
                    models.Index(fields=['jenis_layanan'], name='submissions_jenis_l_4b2d9a_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='NotificationLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('channel', models.CharField(choices=[('WHATSAPP', 'WHATSAPP'), ('EMAIL', 'EMAIL')], max_length=10)),
                ('send_status', models.CharField(choices=[('SUCCESS', 'SUCCESS'), ('FAILED', 'FAILED')], max_length=10)),
                ('payload', JSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('submission', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='notification_logs', to='submissions.submission')),
            ],
            options={
                'db_table': 'notification_logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['submission', 'channel'], name='notificatio_submiss_7e21c3_idx'),
                    models.Index(fields=['channel', 'send_status'], name='notificatio_channel_93d5b8_idx'),
                ],
            },
        ),
    ]
