"""
Where to send a learner once the delivery tool has nothing more to show.
"""
import logging

from django.utils.translation import gettext as _

from lti_delivery_provider.constants import (
    PARAM_SKIP_THANKYOU,
    STATE_ACTIVE,
    STATE_FINISHED,
    STATE_PAUSED,
    STATE_TERMINATED,
)
from lti_delivery_provider.utils import add_query_params, get_url

log = logging.getLogger(__name__)


def get_lti_message(delivery_execution):
    """
    Return the lti_msg describing the state of the execution to the consumer.
    """
    if delivery_execution is None:
        return None
    return {
        STATE_ACTIVE: _('Your test is in progress'),
        STATE_PAUSED: _('Your test has been paused'),
        STATE_FINISHED: _('Your test has been submitted'),
        STATE_TERMINATED: _('Your test has been terminated'),
    }.get(delivery_execution.state)


class LtiNavigationService:
    """
    Builds the URL a learner is sent to at the end of a delivery.
    """

    def show_thank_you(self, launch_data):
        """
        The thank you page is skipped only on request and when the consumer gave a return url.
        """
        return not (launch_data.get_boolean_variable(PARAM_SKIP_THANKYOU) and launch_data.has_return_url())

    def get_return_url(self, launch_data, delivery_execution=None):
        """
        Return the thank you page url, or the consumer return url when the thank you page is skipped.
        """
        if self.show_thank_you(launch_data):
            params = {}
            if delivery_execution is not None:
                params['deliveryExecution'] = delivery_execution.get_identifier()
            return get_url('thank_you', params)

        params = {'lti_msg': get_lti_message(delivery_execution)}
        if delivery_execution is not None:
            params['deliveryExecution'] = delivery_execution.get_identifier()
        return add_query_params(launch_data.get_return_url(), params)
