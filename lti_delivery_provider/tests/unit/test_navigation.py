"""
Unit tests for LtiNavigationService
"""
import ddt
from django.test.testcases import TestCase

from lti_delivery_provider.constants import STATE_ACTIVE, STATE_FINISHED, STATE_PAUSED, STATE_TERMINATED
from lti_delivery_provider.navigation import LtiNavigationService, get_lti_message
from lti_delivery_provider.tests.test_utils import (
    RETURN_URL,
    get_query_params,
    make_delivery,
    make_delivery_execution,
    make_launch_data,
    make_link,
)
from lti_delivery_provider.utils import get_url


@ddt.ddt
class TestLtiNavigationService(TestCase):
    """
    Unit tests for the url a learner is sent to at the end of a delivery
    """

    def setUp(self):
        super().setUp()
        self.service = LtiNavigationService()
        delivery = make_delivery()
        self.delivery_execution = make_delivery_execution(delivery, make_link(delivery), state=STATE_FINISHED)

    @ddt.data(
        ({}, True),
        ({'custom_skip_thankyou': 'false'}, True),
        ({'custom_skip_thankyou': 'true'}, False),
        ({'custom_skip_thankyou': 'true', 'launch_presentation_return_url': None}, True),
    )
    @ddt.unpack
    def test_show_thank_you(self, variables, expected):
        self.assertEqual(self.service.show_thank_you(make_launch_data(**variables)), expected)

    def test_thank_you_url(self):
        url = self.service.get_return_url(make_launch_data(), self.delivery_execution)

        self.assertEqual(
            url,
            get_url('thank_you', {'deliveryExecution': self.delivery_execution.get_identifier()}),
        )

    def test_thank_you_url_without_execution(self):
        self.assertEqual(self.service.get_return_url(make_launch_data()), get_url('thank_you'))

    def test_consumer_return_url(self):
        url = self.service.get_return_url(
            make_launch_data(launch_presentation_return_url=f'{RETURN_URL}?course=1', custom_skip_thankyou='true'),
            self.delivery_execution,
        )

        self.assertTrue(url.startswith(RETURN_URL))
        self.assertEqual(get_query_params(url), {
            'course': '1',
            'lti_msg': 'Your test has been submitted',
            'deliveryExecution': self.delivery_execution.get_identifier(),
        })

    def test_consumer_return_url_without_execution(self):
        url = self.service.get_return_url(make_launch_data(custom_skip_thankyou='true'))

        self.assertEqual(url, RETURN_URL)

    @ddt.data(
        (STATE_ACTIVE, 'Your test is in progress'),
        (STATE_PAUSED, 'Your test has been paused'),
        (STATE_FINISHED, 'Your test has been submitted'),
        (STATE_TERMINATED, 'Your test has been terminated'),
    )
    @ddt.unpack
    def test_lti_message(self, state, message):
        self.delivery_execution.state = state

        self.assertEqual(get_lti_message(self.delivery_execution), message)

    def test_lti_message_without_execution(self):
        self.assertIsNone(get_lti_message(None))
