"""
Tests for the LTI delivery tool views.
"""
from urllib.parse import urlencode

import ddt
from django.test import Client, override_settings
from django.test.testcases import TestCase
from django.urls import reverse
from edx_django_utils.cache import TieredCache

from lti_delivery_provider.constants import (
    LTI_SESSION_KEY,
    STATE_ACTIVE,
    STATE_FINISHED,
    STATE_PAUSED,
    LtiRoles,
)
from lti_delivery_provider.lti_1p3 import constants as lti_1p3_constants
from lti_delivery_provider.lti_1p3.tests.utils import (
    CLIENT_ID,
    DEPLOYMENT_ID,
    ISSUER,
    create_jwt,
    generate_rsa_key,
    make_launch_message,
)
from lti_delivery_provider.models import (
    DeliveryExecution,
    LaunchQueueConfiguration,
    LtiConsumerCredential,
    LtiLink,
    LtiPlatformRegistration,
)
from lti_delivery_provider.tests.test_utils import (
    CONSUMER_KEY,
    CONSUMER_SECRET,
    DELIVERY_URI,
    FAKE_USER_ID,
    FORM_CONTENT_TYPE,
    RETURN_URL,
    get_query_params,
    make_delivery,
    make_delivery_execution,
    make_link,
    sign_launch_params,
    start_test_session,
)
from lti_delivery_provider.utils import get_url


def view_url(name):
    return reverse(f'lti_delivery_provider:lti_delivery_provider.{name}')


class ViewTestCase(TestCase):
    """
    Base class setting up a configured link
    """

    def setUp(self):
        super().setUp()
        TieredCache.dangerous_clear_all_tiers()
        self.delivery = make_delivery()
        self.link = make_link(delivery=self.delivery)

    def assertErrorRedirect(self, response, code, message=None):  # pylint: disable=invalid-name
        """
        Check the user is sent back to the consumer with the error.
        """
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response['Location'].startswith(RETURN_URL))
        params = get_query_params(response['Location'])
        if code:
            self.assertEqual(params['lti_errorlog'], code)
        else:
            self.assertNotIn('lti_errorlog', params)
        if message:
            self.assertIn(message, params['lti_errormsg'])

    def assertErrorPage(self, response, status_code, message):  # pylint: disable=invalid-name
        self.assertEqual(response.status_code, status_code)
        self.assertTemplateUsed(response, 'lti_delivery_provider/error.html')
        self.assertEqual(response.context['error_msg'], message)


@ddt.ddt
class TestRunEndpoint(ViewTestCase):
    """
    Test `run` method.
    """

    def setUp(self):
        super().setUp()
        self.url = view_url('run')

    def _learner_url(self, delivery_execution):
        return get_url('run_delivery_execution', {'deliveryExecution': delivery_execution.get_identifier()})

    def test_no_session(self):
        response = self.client.get(self.url)

        self.assertErrorPage(response, 403, 'Test Session not found')

    def test_no_session_with_delivery(self):
        response = self.client.get(self.url, {'delivery': DELIVERY_URI})

        self.assertErrorPage(response, 403, 'Test Session not found')

    def test_unconfigured_link_learner(self):
        start_test_session(self.client, make_link(resource_link_id='unconfigured'))

        response = self.client.get(self.url)

        self.assertErrorRedirect(response, 'invalid_parameter', 'This tool has not yet been configured')

    def test_unconfigured_link_learner_without_return_url(self):
        start_test_session(
            self.client,
            make_link(resource_link_id='unconfigured'),
            launch_presentation_return_url=None,
        )

        response = self.client.get(self.url)

        self.assertErrorPage(
            response,
            400,
            'This tool has not yet been configured, please contact your instructor',
        )

    def test_unconfigured_link_instructor(self):
        start_test_session(self.client, make_link(resource_link_id='unconfigured'), roles='Instructor')

        response = self.client.get(self.url)

        self.assertRedirects(response, get_url('configure_delivery'), fetch_redirect_response=False)

    @ddt.data('Learner', LtiRoles.CONTEXT_LEARNER, LtiRoles.CONTEXT_LTI1P3_LEARNER, 'Learner,Instructor')
    def test_first_launch(self, roles):
        """
        Test a new execution is started and paused so the runner resumes it.
        """
        start_test_session(self.client, self.link, roles=roles)

        response = self.client.post(self.url)

        delivery_execution = DeliveryExecution.objects.get()
        self.assertRedirects(response, self._learner_url(delivery_execution), fetch_redirect_response=False)
        self.assertEqual(delivery_execution.user_id, FAKE_USER_ID)
        self.assertEqual(delivery_execution.get_state(), STATE_PAUSED)

    @override_settings(FEATURE_FLAG_MAINTAIN_RESTARTED_DELIVERY_EXECUTION_STATE=True)
    def test_first_launch_state_maintained(self):
        start_test_session(self.client, self.link)

        self.client.get(self.url)

        self.assertEqual(DeliveryExecution.objects.get().get_state(), STATE_ACTIVE)

    @ddt.data(STATE_ACTIVE, STATE_PAUSED)
    def test_relaunch_resumes_execution(self, state):
        delivery_execution = make_delivery_execution(self.delivery, self.link, state=state)
        start_test_session(self.client, self.link)

        response = self.client.get(self.url)

        self.assertRedirects(response, self._learner_url(delivery_execution), fetch_redirect_response=False)
        delivery_execution.refresh_from_db()
        self.assertEqual(delivery_execution.get_state(), STATE_PAUSED)
        self.assertEqual(DeliveryExecution.objects.count(), 1)

    def test_force_restart(self):
        previous = make_delivery_execution(self.delivery, self.link)
        start_test_session(self.client, self.link, custom_force_restart='true')

        response = self.client.get(self.url)

        delivery_execution = DeliveryExecution.objects.exclude(pk=previous.pk).get()
        self.assertRedirects(response, self._learner_url(delivery_execution), fetch_redirect_response=False)
        previous.refresh_from_db()
        self.assertEqual(previous.get_state(), STATE_FINISHED)

    @override_settings(LTI_DELIVERY_PROVIDER_CAPACITY_LIMIT=0)
    def test_force_restart_without_capacity(self):
        previous = make_delivery_execution(self.delivery, self.link, state=STATE_PAUSED)
        start_test_session(self.client, self.link, custom_force_restart='true')

        response = self.client.get(self.url)

        self.assertRedirects(
            response,
            get_url('launch_queue', {'position': 1, 'delivery': DELIVERY_URI}),
            fetch_redirect_response=False,
        )
        previous.refresh_from_db()
        self.assertEqual(previous.get_state(), STATE_PAUSED)

    def test_force_restart_limit_reached(self):
        self.delivery.max_executions = 1
        self.delivery.save()
        previous = make_delivery_execution(self.delivery, self.link, state=STATE_PAUSED)
        start_test_session(self.client, self.link, custom_force_restart='true')

        response = self.client.get(self.url)

        self.assertErrorRedirect(response, 'launch_forbidden')
        previous.refresh_from_db()
        self.assertEqual(previous.get_state(), STATE_PAUSED)

    def test_custom_delivery(self):
        other_delivery = make_delivery(uri='http://other-delivery')
        start_test_session(self.client, self.link, custom_delivery='http://other-delivery')

        self.client.get(self.url)

        self.assertEqual(DeliveryExecution.objects.get().delivery, other_delivery)

    def test_delivery_parameter(self):
        other_delivery = make_delivery(uri='http://other-delivery')
        start_test_session(self.client, self.link)

        self.client.get(self.url, {'delivery': 'http://other-delivery'})

        self.assertEqual(DeliveryExecution.objects.get().delivery, other_delivery)

    def test_finished_executions_show_overview(self):
        make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link)

        response = self.client.get(self.url)

        self.assertRedirects(
            response,
            get_url('lti_overview', {'delivery': DELIVERY_URI}),
            fetch_redirect_response=False,
        )

    def test_skip_overview_to_thank_you(self):
        delivery_execution = make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link, custom_skip_overview='true')

        response = self.client.get(self.url)

        self.assertRedirects(
            response,
            get_url('thank_you', {'deliveryExecution': delivery_execution.get_identifier()}),
            fetch_redirect_response=False,
        )

    def test_skip_overview_to_consumer(self):
        delivery_execution = make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link, custom_skip_overview='true', custom_skip_thankyou='true')

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 302)
        self.assertTrue(response['Location'].startswith(RETURN_URL))
        self.assertEqual(get_query_params(response['Location']), {
            'lti_msg': 'Your test has been submitted',
            'deliveryExecution': delivery_execution.get_identifier(),
        })

    def test_execution_limit_reached(self):
        self.delivery.max_executions = 1
        self.delivery.save()
        make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link)

        response = self.client.get(self.url)

        self.assertErrorRedirect(response, 'launch_forbidden', 'User is not authorized to run this delivery')

    def test_execution_limit_reached_without_return_url(self):
        self.delivery.max_executions = 1
        self.delivery.save()
        make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link, launch_presentation_return_url=None)

        response = self.client.get(self.url)

        self.assertErrorPage(response, 403, 'User is not authorized to run this delivery')

    @override_settings(LTI_DELIVERY_PROVIDER_CAPACITY_LIMIT=0)
    def test_no_capacity(self):
        start_test_session(self.client, self.link)

        response = self.client.get(self.url)

        self.assertRedirects(
            response,
            get_url('launch_queue', {'position': 1, 'delivery': DELIVERY_URI}),
            fetch_redirect_response=False,
        )
        self.assertFalse(DeliveryExecution.objects.exists())

    def test_compiled_test_missing(self):
        self.delivery.runtime = ''
        self.delivery.save()
        start_test_session(self.client, self.link)

        response = self.client.get(self.url)

        self.assertErrorRedirect(response, None, 'Unable to extract the compiled test')

    @override_settings(LTI_DELIVERY_PROVIDER_ACCESS_RULES={'run_delivery_execution': []})
    def test_learner_without_runner_access(self):
        start_test_session(self.client, self.link)

        with self.assertLogs('lti_delivery_provider.plugin.views', level='ERROR'):
            response = self.client.get(self.url)

        self.assertErrorPage(response, 403, 'Access to this functionality is restricted')
        self.assertFalse(DeliveryExecution.objects.exists())

    def test_lti1p3_instructor_dry_run(self):
        start_test_session(self.client, self.link, roles=LtiRoles.CONTEXT_LTI1P3_INSTRUCTOR)

        response = self.client.get(self.url)

        delivery_execution = DeliveryExecution.objects.get()
        self.assertRedirects(response, self._learner_url(delivery_execution), fetch_redirect_response=False)

    @ddt.data('Instructor', 'ContentDeveloper', 'Administrator')
    def test_lti1p1_instructor(self, roles):
        start_test_session(self.client, self.link, roles=roles)

        response = self.client.get(self.url)

        self.assertRedirects(
            response,
            get_url('show_delivery', {'uri': DELIVERY_URI}),
            fetch_redirect_response=False,
        )
        self.assertFalse(DeliveryExecution.objects.exists())

    def test_other_role(self):
        start_test_session(self.client, self.link, roles='urn:lti:role:ims/lis/Mentor')

        response = self.client.get(self.url)

        self.assertErrorPage(response, 403, 'Access to this functionality is restricted to students')


class TestLaunchQueueEndpoint(ViewTestCase):
    """
    Test `launch_queue` method.
    """

    def setUp(self):
        super().setUp()
        self.url = view_url('launch_queue')

    def test_queue_page(self):
        response = self.client.get(self.url, {'delivery': DELIVERY_URI, 'position': '3'})

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'lti_delivery_provider/launch_queue.html')
        self.assertEqual(response.context['position'], 3)
        self.assertEqual(response.context['delivery'], self.delivery)
        self.assertEqual(response.context['client_params'], {
            'relaunchInterval': 30,
            'relaunchIntervalDeviation': 5,
            'runUrl': get_url('run', {'delivery': DELIVERY_URI}),
            'capacityCheckUrl': get_url('check_capacity'),
        })
        # Polling goes on after a failed capacity check
        self.assertContains(response, '.catch(')

    def test_queue_configuration(self):
        LaunchQueueConfiguration.objects.create(enabled=True, relaunch_interval=10, relaunch_interval_deviation=1)

        response = self.client.get(self.url, {'delivery': DELIVERY_URI})

        self.assertEqual(response.context['client_params']['relaunchInterval'], 10)
        self.assertEqual(response.context['client_params']['relaunchIntervalDeviation'], 1)

    def test_invalid_position(self):
        response = self.client.get(self.url, {'delivery': DELIVERY_URI, 'position': 'first'})

        self.assertEqual(response.context['position'], 0)

    def test_delivery_from_session(self):
        start_test_session(self.client, self.link)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['delivery'], self.delivery)

    def test_unknown_delivery(self):
        response = self.client.get(self.url, {'delivery': 'http://unknown'})

        self.assertErrorPage(response, 400, 'Delivery does not exist. Please contact your instructor.')


class TestCheckCapacityEndpoint(ViewTestCase):
    """
    Test `check_capacity` method.
    """

    def setUp(self):
        super().setUp()
        self.url = view_url('check_capacity')
        make_delivery_execution(self.delivery, self.link)

    def test_unlimited_capacity(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'id': '', 'status': 1})

    @override_settings(LTI_DELIVERY_PROVIDER_CAPACITY_LIMIT=2)
    def test_free_slot(self):
        self.assertEqual(self.client.get(self.url).json(), {'id': '', 'status': 1})

    @override_settings(LTI_DELIVERY_PROVIDER_CAPACITY_LIMIT=1)
    def test_full(self):
        self.assertEqual(self.client.get(self.url).json(), {'id': '', 'status': 0})


class TestLti1p1LaunchEndpoint(ViewTestCase):
    """
    Test `launch` method.
    """

    def setUp(self):
        super().setUp()
        self.url = view_url('launch')
        self.launch_url = f'http://testserver{self.url}'
        LtiConsumerCredential.objects.create(consumer_key=CONSUMER_KEY, consumer_secret=CONSUMER_SECRET)
        self.params = {
            'lti_message_type': 'basic-lti-launch-request',
            'lti_version': 'LTI-1p0',
            'resource_link_id': 'resource-link-1',
            'user_id': FAKE_USER_ID,
            'roles': 'Learner',
            'launch_presentation_return_url': RETURN_URL,
        }

    def _launch(self, body, url=None):
        return self.client.post(url or self.url, data=body, content_type=FORM_CONTENT_TYPE)

    def test_launch(self):
        response = self._launch(sign_launch_params(self.launch_url, self.params))

        self.assertRedirects(response, get_url('run'), fetch_redirect_response=False)
        lti_session = self.client.session[LTI_SESSION_KEY]
        self.assertEqual(lti_session['user_id'], FAKE_USER_ID)
        self.assertEqual(lti_session['roles'], [LtiRoles.CONTEXT_LEARNER])
        self.assertEqual(lti_session['link_id'], self.link.pk)
        self.assertNotIn('oauth_signature', lti_session['launch_data']['variables'])

    def test_launch_keeps_query_parameters(self):
        url = f'{self.url}?{urlencode({"delivery": DELIVERY_URI})}'
        body = sign_launch_params(f'http://testserver{url}', self.params)

        response = self._launch(body, url)

        self.assertRedirects(
            response,
            get_url('run', {'delivery': DELIVERY_URI}),
            fetch_redirect_response=False,
        )

    def test_launch_then_run(self):
        response = self._launch(sign_launch_params(self.launch_url, self.params))
        response = self.client.get(response['Location'])

        delivery_execution = DeliveryExecution.objects.get()
        self.assertRedirects(
            response,
            get_url('run_delivery_execution', {'deliveryExecution': delivery_execution.get_identifier()}),
            fetch_redirect_response=False,
        )

    def test_new_link_created(self):
        self.params['resource_link_id'] = 'new-link'

        self._launch(sign_launch_params(self.launch_url, self.params))

        self.assertTrue(LtiLink.objects.filter(consumer=CONSUMER_KEY, resource_link_id='new-link').exists())

    def test_unknown_consumer(self):
        response = self._launch(sign_launch_params(self.launch_url, self.params, key='unknown'))

        self.assertErrorPage(response, 403, 'Unknown consumer key')

    def test_bad_signature(self):
        response = self._launch(sign_launch_params(self.launch_url, self.params, secret='wrong-secret'))

        self.assertErrorPage(response, 403, 'The LTI launch could not be verified')
        self.assertNotIn(LTI_SESSION_KEY, self.client.session)

    def test_replayed_launch(self):
        body = sign_launch_params(self.launch_url, self.params)
        self._launch(body)

        response = self._launch(body)

        self.assertErrorPage(response, 403, 'The LTI launch could not be verified')

    def test_unsupported_message_type(self):
        self.params['lti_message_type'] = 'ContentItemSelectionRequest'

        response = self._launch(sign_launch_params(self.launch_url, self.params))

        self.assertErrorPage(response, 400, 'Unsupported LTI message type')

    def test_get_not_allowed(self):
        self.assertEqual(self.client.get(self.url).status_code, 405)


class TestLti1p3LaunchEndpoint(ViewTestCase):
    """
    Test `launch_1p3` method.
    """

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.rsa_key, cls.public_key = generate_rsa_key()

    def setUp(self):
        super().setUp()
        self.url = view_url('launch_1p3')
        LtiPlatformRegistration.objects.create(
            issuer=ISSUER,
            client_id=CLIENT_ID,
            deployment_id=DEPLOYMENT_ID,
            platform_public_key=self.public_key,
        )
        self.link_1p3 = LtiLink.objects.create(
            consumer=ISSUER,
            resource_link_id='resource-link-1p3',
            delivery=self.delivery,
        )

    def _launch(self, message):
        return self.client.post(self.url, {'id_token': create_jwt(self.rsa_key, message)})

    def test_learner_launch(self):
        response = self._launch(make_launch_message())

        delivery_execution = DeliveryExecution.objects.get()
        self.assertRedirects(
            response,
            get_url('run_delivery_execution', {'deliveryExecution': delivery_execution.get_identifier()}),
            fetch_redirect_response=False,
        )
        self.assertEqual(delivery_execution.user_id, 'learner-1p3')
        self.assertEqual(delivery_execution.lti_links.get().link, self.link_1p3)

    def test_instructor_launch_unconfigured_link(self):
        message = make_launch_message(**{
            lti_1p3_constants.CLAIM_ROLES: [LtiRoles.CONTEXT_LTI1P3_INSTRUCTOR],
            lti_1p3_constants.CLAIM_RESOURCE_LINK: {'id': 'new-link'},
        })

        response = self._launch(message)

        self.assertRedirects(response, get_url('configure_delivery'), fetch_redirect_response=False)
        self.assertTrue(LtiLink.objects.filter(consumer=ISSUER, resource_link_id='new-link').exists())

    def test_invalid_token(self):
        response = self.client.post(self.url, {'id_token': 'not-a-token'})

        self.assertErrorPage(response, 403, 'The JWT could not be parsed because it is malformed.')

    def test_missing_token(self):
        response = self.client.post(self.url)

        self.assertEqual(response.status_code, 403)
        self.assertTemplateUsed(response, 'lti_delivery_provider/error.html')


class TestConfigureDeliveryEndpoint(ViewTestCase):
    """
    Test `configure_delivery` and `show_delivery` methods.
    """

    def setUp(self):
        super().setUp()
        self.url = view_url('configure_delivery')
        self.unconfigured_link = make_link(resource_link_id='unconfigured')

    def test_list_deliveries(self):
        make_delivery(uri='http://other-delivery', label='Another delivery')
        start_test_session(self.client, self.unconfigured_link, roles='Instructor')

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'link': 'unconfigured',
            'selected': None,
            'deliveries': [
                {'uri': 'http://other-delivery', 'label': 'Another delivery'},
                {'uri': DELIVERY_URI, 'label': 'Delivery'},
            ],
        })

    def test_assign_delivery(self):
        start_test_session(self.client, self.unconfigured_link, roles='Instructor')

        response = self.client.post(self.url, {'delivery': DELIVERY_URI})

        self.assertRedirects(
            response,
            get_url('show_delivery', {'uri': DELIVERY_URI}),
            fetch_redirect_response=False,
        )
        self.unconfigured_link.refresh_from_db()
        self.assertEqual(self.unconfigured_link.delivery, self.delivery)

    def test_assign_unknown_delivery(self):
        start_test_session(self.client, self.unconfigured_link, roles='Instructor')

        response = self.client.post(self.url, {'delivery': 'http://unknown'})

        self.assertErrorRedirect(response, 'invalid_parameter')
        self.unconfigured_link.refresh_from_db()
        self.assertIsNone(self.unconfigured_link.delivery)

    def test_learner_refused(self):
        start_test_session(self.client, self.unconfigured_link)

        response = self.client.post(self.url, {'delivery': DELIVERY_URI})

        self.assertErrorRedirect(response, 'unauthorized')
        self.unconfigured_link.refresh_from_db()
        self.assertIsNone(self.unconfigured_link.delivery)

    def test_no_session(self):
        self.assertErrorPage(self.client.get(self.url), 403, 'Test Session not found')

    def test_show_delivery(self):
        make_delivery_execution(self.delivery, self.link)
        start_test_session(self.client, self.link, roles='Instructor')

        response = self.client.get(view_url('show_delivery'), {'uri': DELIVERY_URI})

        self.assertEqual(response.json(), {
            'uri': DELIVERY_URI,
            'label': 'Delivery',
            'max_executions': 0,
            'executions': 1,
            'linked': True,
        })

    def test_show_unknown_delivery(self):
        start_test_session(self.client, self.link, roles='Instructor')

        response = self.client.get(view_url('show_delivery'), {'uri': 'http://unknown'})

        self.assertErrorRedirect(response, 'invalid_parameter')


class TestRunnerEndpoints(ViewTestCase):
    """
    Test `run_delivery_execution`, `lti_overview`, `start_delivery_execution` and `thank_you` methods.
    """

    def _run(self, identifier):
        return self.client.get(view_url('run_delivery_execution'), {'deliveryExecution': identifier})

    def _start(self, client=None):
        return (client or self.client).post(view_url('start_delivery_execution'), {'delivery': DELIVERY_URI})

    def test_run_paused_execution(self):
        delivery_execution = make_delivery_execution(self.delivery, self.link, state=STATE_PAUSED)
        start_test_session(self.client, self.link)

        response = self._run(delivery_execution.get_identifier())

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'lti_delivery_provider/runner.html')
        delivery_execution.refresh_from_db()
        self.assertEqual(delivery_execution.get_state(), STATE_ACTIVE)

    def test_run_finished_execution(self):
        delivery_execution = make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link)

        response = self._run(delivery_execution.get_identifier())

        self.assertRedirects(
            response,
            get_url('thank_you', {'deliveryExecution': delivery_execution.get_identifier()}),
            fetch_redirect_response=False,
        )

    def test_run_execution_of_other_user(self):
        delivery_execution = make_delivery_execution(self.delivery, self.link, user_id='other-user')
        start_test_session(self.client, self.link)

        response = self._run(delivery_execution.get_identifier())

        self.assertErrorRedirect(response, 'launch_forbidden')

    def test_run_invalid_identifier(self):
        start_test_session(self.client, self.link)

        self.assertErrorRedirect(self._run('not-a-uuid'), 'launch_forbidden')

    def test_overview(self):
        delivery_execution = make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link)

        response = self.client.get(view_url('lti_overview'), {'delivery': DELIVERY_URI})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['executions'], [delivery_execution])
        self.assertTrue(response.context['can_start'])
        self.assertEqual(
            response.context['start_url'],
            get_url('start_delivery_execution', {'delivery': DELIVERY_URI}),
        )
        self.assertContains(response, 'method="post"')
        self.assertContains(response, 'csrfmiddlewaretoken')
        self.assertEqual(response.context['return_url'], RETURN_URL)

    def test_start_from_overview(self):
        make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link)

        response = self._start()

        delivery_execution = DeliveryExecution.objects.get(state=STATE_ACTIVE)
        self.assertRedirects(
            response,
            get_url('run_delivery_execution', {'deliveryExecution': delivery_execution.get_identifier()}),
            fetch_redirect_response=False,
        )

    def test_start_not_allowed(self):
        self.delivery.max_executions = 1
        self.delivery.save()
        make_delivery_execution(self.delivery, self.link, state=STATE_FINISHED)
        start_test_session(self.client, self.link)

        response = self._start()

        self.assertErrorRedirect(response, 'launch_forbidden')
        self.assertEqual(DeliveryExecution.objects.count(), 1)

    @override_settings(LTI_DELIVERY_PROVIDER_CAPACITY_LIMIT=0)
    def test_start_without_capacity(self):
        start_test_session(self.client, self.link)

        response = self._start()

        self.assertRedirects(
            response,
            get_url('launch_queue', {'position': 1, 'delivery': DELIVERY_URI}),
            fetch_redirect_response=False,
        )

    def test_start_get_not_allowed(self):
        start_test_session(self.client, self.link)

        response = self.client.get(view_url('start_delivery_execution'), {'delivery': DELIVERY_URI})

        self.assertEqual(response.status_code, 405)
        self.assertFalse(DeliveryExecution.objects.exists())

    def test_start_requires_csrf_token(self):
        client = Client(enforce_csrf_checks=True)
        start_test_session(client, self.link)

        response = self._start(client)

        self.assertEqual(response.status_code, 403)
        self.assertFalse(DeliveryExecution.objects.exists())

    def test_thank_you(self):
        start_test_session(self.client, self.link, custom_message='Well done')

        response = self.client.get(view_url('thank_you'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['message'], 'Well done')
        self.assertEqual(response.context['return_url'], RETURN_URL)

    def test_thank_you_default_message(self):
        start_test_session(self.client, self.link)

        response = self.client.get(view_url('thank_you'))

        self.assertEqual(response.context['message'], 'Thank you')

    def test_runner_without_session(self):
        response = self._run('not-a-uuid')

        self.assertErrorPage(response, 403, 'Test Session not found')
