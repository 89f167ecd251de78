"""
URL mappings for the LTI delivery provider.
"""
from django.urls import path

from lti_delivery_provider.plugin.views import (
    check_capacity,
    configure_delivery,
    launch,
    launch_1p3,
    launch_queue,
    lti_overview,
    run,
    run_delivery_execution,
    show_delivery,
    start_delivery_execution,
    thank_you,
)

app_name = 'lti_delivery_provider'
urlpatterns = [
    path(
        'lti_delivery_provider/v1/launch',
        launch,
        name='lti_delivery_provider.launch'
    ),
    path(
        'lti_delivery_provider/v1/launch1p3',
        launch_1p3,
        name='lti_delivery_provider.launch_1p3'
    ),
    path(
        'lti_delivery_provider/v1/run',
        run,
        name='lti_delivery_provider.run'
    ),
    path(
        'lti_delivery_provider/v1/launch_queue',
        launch_queue,
        name='lti_delivery_provider.launch_queue'
    ),
    path(
        'lti_delivery_provider/v1/check_capacity',
        check_capacity,
        name='lti_delivery_provider.check_capacity'
    ),
    path(
        'lti_delivery_provider/v1/link/configure',
        configure_delivery,
        name='lti_delivery_provider.configure_delivery'
    ),
    path(
        'lti_delivery_provider/v1/link/show',
        show_delivery,
        name='lti_delivery_provider.show_delivery'
    ),
    path(
        'lti_delivery_provider/v1/runner/run',
        run_delivery_execution,
        name='lti_delivery_provider.run_delivery_execution'
    ),
    path(
        'lti_delivery_provider/v1/runner/overview',
        lti_overview,
        name='lti_delivery_provider.lti_overview'
    ),
    path(
        'lti_delivery_provider/v1/runner/start',
        start_delivery_execution,
        name='lti_delivery_provider.start_delivery_execution'
    ),
    path(
        'lti_delivery_provider/v1/runner/thank_you',
        thank_you,
        name='lti_delivery_provider.thank_you'
    ),
]
