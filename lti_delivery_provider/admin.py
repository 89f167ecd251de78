"""
Admin views for the LTI delivery provider models.
"""
from config_models.admin import ConfigurationModelAdmin
from django.contrib import admin

from lti_delivery_provider.models import (
    Delivery,
    DeliveryExecution,
    LaunchQueueConfiguration,
    LtiConsumerCredential,
    LtiDeliveryExecutionLink,
    LtiLink,
    LtiPlatformRegistration,
)


class DeliveryAdmin(admin.ModelAdmin):
    list_display = ('uri', 'label', 'max_executions')
    search_fields = ['uri', 'label']


class DeliveryExecutionAdmin(admin.ModelAdmin):
    """
    Admin view for DeliveryExecution models.

    Executions change state through the delivery tool only.
    """
    list_display = ('identifier', 'delivery', 'user_id', 'state', 'started_at')
    list_filter = ('state',)
    search_fields = ['user_id', 'identifier']
    readonly_fields = ('identifier', 'state', 'started_at', 'finished_at')


class LtiLinkAdmin(admin.ModelAdmin):
    list_display = ('consumer', 'resource_link_id', 'delivery')
    search_fields = ['consumer', 'resource_link_id']


admin.site.register(Delivery, DeliveryAdmin)
admin.site.register(DeliveryExecution, DeliveryExecutionAdmin)
admin.site.register(LtiLink, LtiLinkAdmin)
admin.site.register(LtiDeliveryExecutionLink)
admin.site.register(LtiConsumerCredential)
admin.site.register(LtiPlatformRegistration)
admin.site.register(LaunchQueueConfiguration, ConfigurationModelAdmin)
