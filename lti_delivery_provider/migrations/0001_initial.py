import uuid

import django.core.validators
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
            name='Delivery',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uri', models.CharField(max_length=255, unique=True)),
                ('label', models.CharField(blank=True, max_length=255)),
                ('runtime', models.TextField(blank=True, help_text='Service call to the compiled test of this delivery.')),
                ('max_executions', models.PositiveIntegerField(default=0, help_text='Maximum number of executions per user. 0 means unlimited.')),
            ],
            options={
                'verbose_name_plural': 'deliveries',
            },
        ),
        migrations.CreateModel(
            name='DeliveryExecution',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('identifier', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('user_id', models.CharField(db_index=True, max_length=255)),
                ('state', models.CharField(choices=[('http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusActive', 'Active'), ('http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusPaused', 'Paused'), ('http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusFinished', 'Finished'), ('http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusTerminated', 'Terminated')], default='http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusActive', max_length=255)),
                ('started_at', models.DateTimeField(auto_now_add=True)),
                ('finished_at', models.DateTimeField(blank=True, null=True)),
                ('delivery', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='executions', to='lti_delivery_provider.delivery')),
            ],
            options={
                'ordering': ['started_at', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='LtiConsumerCredential',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('label', models.CharField(blank=True, max_length=255)),
                ('consumer_key', models.CharField(max_length=255, unique=True)),
                ('consumer_secret', models.CharField(help_text='Shared secret used to sign LTI 1.1 launches. Keep this value secret.', max_length=255)),
            ],
        ),
        migrations.CreateModel(
            name='LtiLink',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('consumer', models.CharField(max_length=255)),
                ('resource_link_id', models.CharField(max_length=255)),
                ('delivery', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='links', to='lti_delivery_provider.delivery')),
            ],
            options={
                'unique_together': {('consumer', 'resource_link_id')},
            },
        ),
        migrations.CreateModel(
            name='LtiPlatformRegistration',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('issuer', models.CharField(max_length=255)),
                ('client_id', models.CharField(max_length=255)),
                ('deployment_id', models.CharField(blank=True, help_text='When set, launches must carry this deployment id.', max_length=255)),
                ('platform_keyset_url', models.CharField(blank=True, help_text="This is the platform's JWK (JSON Web Key) Keyset (JWKS) URL. One of either platform_keyset_url or platform_public_key must not be blank.", max_length=255, verbose_name='LTI 1.3 Platform Keyset URL')),
                ('platform_public_key', models.TextField(blank=True, help_text="This is the platform's public key in PEM format.", verbose_name='LTI 1.3 Platform Public Key')),
            ],
            options={
                'unique_together': {('issuer', 'client_id')},
            },
        ),
        migrations.CreateModel(
            name='LtiDeliveryExecutionLink',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(max_length=255)),
                ('delivery_execution', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lti_links', to='lti_delivery_provider.deliveryexecution')),
                ('link', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='execution_links', to='lti_delivery_provider.ltilink')),
            ],
            options={
                'ordering': ['delivery_execution__started_at', 'pk'],
                'indexes': [models.Index(fields=['user_id', 'link'], name='lti_dp_execlink_user_idx')],
            },
        ),
        migrations.CreateModel(
            name='LaunchQueueConfiguration',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('change_date', models.DateTimeField(auto_now_add=True, verbose_name='Change date')),
                ('enabled', models.BooleanField(default=False, verbose_name='Enabled')),
                ('relaunch_interval', models.PositiveIntegerField(default=30, help_text='Seconds the queue page waits before checking capacity again.', validators=[django.core.validators.MinValueValidator(1)])),
                ('relaunch_interval_deviation', models.PositiveIntegerField(default=5, help_text='Random deviation in seconds added to the relaunch interval.')),
                ('changed_by', models.ForeignKey(editable=False, null=True, on_delete=django.db.models.deletion.PROTECT, to=settings.AUTH_USER_MODEL, verbose_name='Changed by')),
            ],
            options={
                'ordering': ('-change_date',),
                'abstract': False,
            },
        ),
    ]
