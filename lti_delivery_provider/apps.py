"""
lti_delivery_provider Django application initialization.
"""

from django.apps import AppConfig


class LtiDeliveryProviderApp(AppConfig):
    """
    Configuration for the lti_delivery_provider Django application.
    """

    name = 'lti_delivery_provider'
    default_auto_field = 'django.db.models.AutoField'

    # Urls are under /api/lti_delivery_provider/
    plugin_app = {
        'url_config': {
            'lms.djangoapp': {
                'namespace': 'lti_delivery_provider',
                'regex': '^api/',
                'relative_path': 'plugin.urls',
            }
        }
    }
