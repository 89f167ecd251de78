"""
Delivery, execution and LTI linking models.
"""
import logging
import uuid

from config_models.models import ConfigurationModel
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from lti_delivery_provider.constants import (
    ACTIVE_STATES,
    FINAL_STATES,
    STATE_ACTIVE,
    STATE_FINISHED,
    STATE_PAUSED,
    STATE_TERMINATED,
)

log = logging.getLogger(__name__)


class Delivery(models.Model):
    """
    An assessment published for delivery.

    .. no_pii:
    """
    uri = models.CharField(max_length=255, unique=True)
    label = models.CharField(max_length=255, blank=True)

    # Serialized call to the compiled test. A delivery without one cannot be started.
    runtime = models.TextField(
        blank=True,
        help_text=_("Service call to the compiled test of this delivery."),
    )

    max_executions = models.PositiveIntegerField(
        default=0,
        help_text=_("Maximum number of executions per user. 0 means unlimited."),
    )

    class Meta:
        app_label = 'lti_delivery_provider'
        verbose_name_plural = 'deliveries'

    def __str__(self):
        return self.label or self.uri

    def exists(self):
        return self.pk is not None

    def get_uri(self):
        return self.uri


class DeliveryExecution(models.Model):
    """
    One attempt of a user at a delivery.

    .. pii: user_id is the identifier sent by the tool consumer
    .. pii_types: id
    .. pii_retirement: retained
    """
    STATE_CHOICES = [
        (STATE_ACTIVE, _('Active')),
        (STATE_PAUSED, _('Paused')),
        (STATE_FINISHED, _('Finished')),
        (STATE_TERMINATED, _('Terminated')),
    ]

    identifier = models.UUIDField(unique=True, default=uuid.uuid4, editable=False)
    delivery = models.ForeignKey(Delivery, on_delete=models.CASCADE, related_name='executions')
    user_id = models.CharField(max_length=255, db_index=True)
    state = models.CharField(max_length=255, choices=STATE_CHOICES, default=STATE_ACTIVE)
    started_at = models.DateTimeField(auto_now_add=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        app_label = 'lti_delivery_provider'
        ordering = ['started_at', 'pk']

    def __str__(self):
        return f"{self.identifier} ({self.delivery}, {self.user_id})"

    def get_identifier(self):
        return str(self.identifier)

    def get_state(self):
        return self.state

    def is_active(self):
        return self.state in ACTIVE_STATES

    def is_final(self):
        return self.state in FINAL_STATES


class LtiLink(models.Model):
    """
    A resource link placed in a tool consumer.

    The link is identified by the consumer (LTI 1.1 consumer key or LTI 1.3
    issuer) and the resource_link_id it sent. Once configured, it points to
    the delivery it launches.

    .. no_pii:
    """
    consumer = models.CharField(max_length=255)
    resource_link_id = models.CharField(max_length=255)
    delivery = models.ForeignKey(
        Delivery,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='links',
    )

    class Meta:
        app_label = 'lti_delivery_provider'
        unique_together = [['consumer', 'resource_link_id']]

    def __str__(self):
        return f"{self.consumer}: {self.resource_link_id}"


class LtiDeliveryExecutionLink(models.Model):
    """
    Ties a delivery execution to the user and the link it was started from.

    .. pii: user_id is the identifier sent by the tool consumer
    .. pii_types: id
    .. pii_retirement: retained
    """
    user_id = models.CharField(max_length=255)
    link = models.ForeignKey(LtiLink, on_delete=models.CASCADE, related_name='execution_links')
    delivery_execution = models.ForeignKey(
        DeliveryExecution,
        on_delete=models.CASCADE,
        related_name='lti_links',
    )

    class Meta:
        app_label = 'lti_delivery_provider'
        ordering = ['delivery_execution__started_at', 'pk']
        indexes = [models.Index(fields=['user_id', 'link'], name='lti_dp_execlink_user_idx')]

    def __str__(self):
        return f"{self.link} - {self.user_id}"


class LtiConsumerCredential(models.Model):
    """
    OAuth credentials of an LTI 1.1 tool consumer.

    .. no_pii:
    """
    label = models.CharField(max_length=255, blank=True)
    consumer_key = models.CharField(max_length=255, unique=True)
    consumer_secret = models.CharField(
        max_length=255,
        help_text=_("Shared secret used to sign LTI 1.1 launches. Keep this value secret."),
    )

    class Meta:
        app_label = 'lti_delivery_provider'

    def __str__(self):
        return self.label or self.consumer_key


class LtiPlatformRegistration(models.Model):
    """
    An LTI 1.3 platform allowed to launch the delivery tool.

    .. no_pii:
    """
    issuer = models.CharField(max_length=255)
    client_id = models.CharField(max_length=255)
    deployment_id = models.CharField(
        max_length=255,
        blank=True,
        help_text=_("When set, launches must carry this deployment id."),
    )
    platform_keyset_url = models.CharField(
        "LTI 1.3 Platform Keyset URL",
        max_length=255,
        blank=True,
        help_text='This is the platform\'s JWK (JSON Web Key) Keyset (JWKS) URL. One of either '
                  'platform_keyset_url or platform_public_key must not be blank.'
    )
    platform_public_key = models.TextField(
        "LTI 1.3 Platform Public Key",
        blank=True,
        help_text='This is the platform\'s public key in PEM format.'
    )

    class Meta:
        app_label = 'lti_delivery_provider'
        unique_together = [['issuer', 'client_id']]

    def __str__(self):
        return f"{self.issuer} ({self.client_id})"


class LaunchQueueConfiguration(ConfigurationModel):
    """
    Options sent to the launch queue page.

    .. no_pii:
    """
    relaunch_interval = models.PositiveIntegerField(
        default=30,
        validators=[MinValueValidator(1)],
        help_text=_("Seconds the queue page waits before checking capacity again."),
    )
    relaunch_interval_deviation = models.PositiveIntegerField(
        default=5,
        help_text=_("Random deviation in seconds added to the relaunch interval."),
    )

    class Meta(ConfigurationModel.Meta):
        app_label = 'lti_delivery_provider'

    def get_config(self):
        """
        Return the options as passed to the queue page scripts.
        """
        return {
            'relaunchInterval': self.relaunch_interval,
            'relaunchIntervalDeviation': self.relaunch_interval_deviation,
        }
