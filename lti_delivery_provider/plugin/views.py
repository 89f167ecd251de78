"""
LTI delivery tool views
"""
import logging
from functools import wraps

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.utils import translation
from django.utils.translation import gettext as _
from django.views.decorators.clickjacking import xframe_options_exempt
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from rest_framework.decorators import api_view, authentication_classes, permission_classes, renderer_classes
from rest_framework.permissions import AllowAny
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response

from lti_delivery_provider.access import ACTION_CONFIGURE_DELIVERY, ACTION_RUN_DELIVERY_EXECUTION, has_access
from lti_delivery_provider.assignment import LtiAssignment
from lti_delivery_provider.capacity import CapacityService
from lti_delivery_provider.constants import (
    LTI_1P1_MESSAGE_TYPE,
    LTI_CONSUMER_KEY,
    LTI_MESSAGE_TYPE,
    PARAM_SKIP_OVERVIEW,
    PARAM_THANKYOU_MESSAGE,
    STATE_PAUSED,
    LtiErrorMessage,
    LtiRoles,
)
from lti_delivery_provider.data import LtiLaunchData
from lti_delivery_provider.exceptions import ActionFullException, LtiException, QtiTestExtractionFailedException
from lti_delivery_provider.execution import LtiDeliveryExecutionService
from lti_delivery_provider.launch_data import LtiLaunchDataService
from lti_delivery_provider.lti_1p1.exceptions import Lti1p1Error
from lti_delivery_provider.lti_1p1.oauth import verify_launch_signature
from lti_delivery_provider.lti_1p3.exceptions import Lti1p3Exception
from lti_delivery_provider.lti_1p3.message import validate_launch_message
from lti_delivery_provider.models import Delivery, DeliveryExecution, LaunchQueueConfiguration, LtiConsumerCredential
from lti_delivery_provider.navigation import LtiNavigationService
from lti_delivery_provider.session import end_lti_session, get_lti_session, start_lti1p1_session, start_lti1p3_session
from lti_delivery_provider.state import StateService
from lti_delivery_provider.toggles import is_delivery_execution_state_reset_enabled
from lti_delivery_provider.utils import add_query_params, get_request_parameter, get_url, has_request_parameter

log = logging.getLogger(__name__)

ERROR_STATUS = {
    LtiErrorMessage.ERROR_UNAUTHORIZED: 403,
    LtiErrorMessage.ERROR_LAUNCH_FORBIDDEN: 403,
    LtiErrorMessage.ERROR_SESSION_NOT_FOUND: 403,
}


def return_error(request, message, return_link=True, code=None):
    """
    Report an error to the user.

    When ``return_link`` is set and the consumer sent a return url, the user is
    sent back to the consumer with the message in ``lti_errormsg``. Otherwise an
    error page is rendered.
    """
    lti_session = get_lti_session(request)
    launch_data = lti_session.get_launch_data() if lti_session else None

    if return_link and launch_data is not None and launch_data.has_return_url():
        return redirect(add_query_params(launch_data.get_return_url(), {
            'lti_errormsg': message,
            'lti_errorlog': code,
        }))

    return render(
        request,
        'lti_delivery_provider/error.html',
        context={'error_msg': message},
        status=ERROR_STATUS.get(code, 403 if not return_link else 400),
    )


def handle_lti_exceptions(view_func):
    """
    Turn LtiException raised by a view into an error response.
    """
    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except LtiException as exc:
            log.info("LTI error while processing %s: %s", request.path, exc)
            return return_error(request, exc.message, code=exc.code)

    return wrapped_view


def _require_lti_session(request):
    lti_session = get_lti_session(request)
    if lti_session is None:
        raise LtiException(_('Test Session not found'), LtiErrorMessage.ERROR_SESSION_NOT_FOUND)
    return lti_session


def _get_delivery(request, lti_session):
    """
    Returns the delivery associated with the current link
    either from the request or from the launch data
    returns None if none found
    """
    if has_request_parameter(request, 'delivery'):
        return Delivery.objects.filter(uri=get_request_parameter(request, 'delivery')).first()

    if lti_session is None:
        raise LtiException(_('Test Session not found'), LtiErrorMessage.ERROR_SESSION_NOT_FOUND)

    return LtiLaunchDataService().find_delivery_from_launch_data(
        lti_session.get_launch_data(),
        lti_session.get_lti_link_resource(),
    )


def _reset_delivery_execution_state(delivery_execution):
    """
    Pause a resumed execution so the runner restarts it, unless the state must be maintained.
    """
    if (
        delivery_execution is None
        or not is_delivery_execution_state_reset_enabled()
        or delivery_execution.get_state() == STATE_PAUSED
    ):
        return

    StateService().pause(delivery_execution)


def _get_learner_url(delivery, lti_session, active_execution):
    """
    Return the url the learner is sent to for ``delivery``.
    """
    if active_execution is not None:
        return get_url('run_delivery_execution', {'deliveryExecution': active_execution.get_identifier()})

    user = lti_session.get_user()
    if not LtiAssignment().is_delivery_execution_allowed(delivery.get_uri(), user):
        raise LtiException(
            _('User is not authorized to run this delivery'),
            LtiErrorMessage.ERROR_LAUNCH_FORBIDDEN,
        )

    launch_data = user.get_launch_data()
    if launch_data.has_variable(PARAM_SKIP_OVERVIEW):
        executions = LtiDeliveryExecutionService().get_linked_delivery_executions(
            delivery,
            lti_session.get_lti_link_resource(),
            user.get_identifier(),
        )
        last_execution = executions[-1] if executions else None
        return LtiNavigationService().get_return_url(launch_data, last_execution)

    return get_url('lti_overview', {'delivery': delivery.get_uri()})


@require_http_methods(["GET", "POST"])
@xframe_options_exempt
@csrf_exempt
@handle_lti_exceptions
def run(request):
    """
    Entry point of a launch: sends the user to the screen matching their role and attempt.
    """
    lti_session = get_lti_session(request)
    delivery = _get_delivery(request, lti_session)

    if delivery is None:
        if lti_session is not None and has_access(lti_session.get_user(), ACTION_CONFIGURE_DELIVERY):
            # user authorised to select the Delivery
            return redirect(get_url('configure_delivery'))
        # user NOT authorised to select the Delivery
        raise LtiException(
            _('This tool has not yet been configured, please contact your instructor'),
            LtiErrorMessage.ERROR_INVALID_PARAMETER,
        )

    if lti_session is None:
        raise LtiException(_('Test Session not found'), LtiErrorMessage.ERROR_SESSION_NOT_FOUND)

    user = lti_session.get_user()
    roles = user.get_roles()
    is_learner = user.has_any_role(LtiRoles.LEARNER_ROLES)
    is_dry_run = not is_learner and LtiRoles.CONTEXT_LTI1P3_INSTRUCTOR in roles

    if is_learner or is_dry_run:
        if not has_access(user, ACTION_RUN_DELIVERY_EXECUTION):
            log.error('Lti learner has no access to delivery runner')
            return return_error(request, _('Access to this functionality is restricted'), return_link=False)

        try:
            active_execution = LtiDeliveryExecutionService().get_active_delivery_execution(delivery, lti_session)

            _reset_delivery_execution_state(active_execution)
            return redirect(_get_learner_url(delivery, lti_session, active_execution))
        except QtiTestExtractionFailedException as exc:
            log.info(str(exc))
            raise LtiException(str(exc)) from exc
        except ActionFullException as exc:
            return redirect(get_url('launch_queue', {
                'position': exc.position,
                'delivery': delivery.get_uri(),
            }))

    if has_access(user, ACTION_CONFIGURE_DELIVERY):
        return redirect(get_url('show_delivery', {'uri': delivery.get_uri()}))

    return return_error(request, _('Access to this functionality is restricted to students'), return_link=False)


@require_http_methods(["GET"])
@xframe_options_exempt
@handle_lti_exceptions
def launch_queue(request):
    """
    Waiting page shown while the platform has no capacity to start the delivery.
    """
    with translation.override(settings.LANGUAGE_CODE):
        delivery = _get_delivery(request, get_lti_session(request))
        if delivery is None:
            raise LtiException(
                _('Delivery does not exist. Please contact your instructor.'),
                LtiErrorMessage.ERROR_INVALID_PARAMETER,
            )

        config = LaunchQueueConfiguration.current().get_config()
        config['runUrl'] = get_url('run', {'delivery': delivery.get_uri()})
        config['capacityCheckUrl'] = get_url('check_capacity')

        try:
            position = int(get_request_parameter(request, 'position', 0))
        except (TypeError, ValueError):
            position = 0

        return render(request, 'lti_delivery_provider/launch_queue.html', {
            'delivery': delivery,
            'position': position,
            'client_params': config,
        })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
@renderer_classes([JSONRenderer])
def check_capacity(request):  # pylint: disable=unused-argument
    """
    Tell the launch queue page whether a new execution can start.
    """
    capacity = CapacityService().get_capacity()
    payload = {
        'id': '',
        'status': 0,
    }
    if capacity == CapacityService.UNLIMITED or capacity > 0:
        payload['status'] = 1

    return Response(payload)


@require_http_methods(["POST"])
@xframe_options_exempt
@csrf_exempt
@handle_lti_exceptions
def launch(request):
    """
    LTI 1.1 launch: verifies the OAuth signature, starts the LTI session and runs the tool.
    """
    end_lti_session(request)

    consumer_key = request.POST.get(LTI_CONSUMER_KEY)
    credential = LtiConsumerCredential.objects.filter(consumer_key=consumer_key).first()
    if credential is None:
        log.info("LTI 1.1 launch with unknown consumer key %r", consumer_key)
        raise LtiException(_('Unknown consumer key'), LtiErrorMessage.ERROR_UNAUTHORIZED)

    try:
        verify_launch_signature(request, credential.consumer_secret)
    except Lti1p1Error as exc:
        log.warning("LTI 1.1 launch from consumer %r refused: %s", consumer_key, exc, exc_info=True)
        raise LtiException(_('The LTI launch could not be verified'), LtiErrorMessage.ERROR_UNAUTHORIZED) from exc

    launch_data = LtiLaunchData.from_request_params(request.POST.dict())
    if launch_data.get_variable(LTI_MESSAGE_TYPE) != LTI_1P1_MESSAGE_TYPE:
        raise LtiException(
            _('Unsupported LTI message type'),
            LtiErrorMessage.ERROR_INVALID_PARAMETER,
        )

    start_lti1p1_session(request, launch_data)
    return redirect(get_url('run', request.GET.dict()))


@require_http_methods(["POST"])
@xframe_options_exempt
@csrf_exempt
@handle_lti_exceptions
def launch_1p3(request):
    """
    LTI 1.3 launch: validates the id_token, starts the LTI session and runs the tool.
    """
    end_lti_session(request)

    try:
        message = validate_launch_message(request.POST.get('id_token'))
    except Lti1p3Exception as exc:
        log.warning("LTI 1.3 launch refused: %s", exc, exc_info=True)
        raise LtiException(str(exc), LtiErrorMessage.ERROR_UNAUTHORIZED) from exc

    start_lti1p3_session(request, message)
    return run(request)


@require_http_methods(["GET", "POST"])
@xframe_options_exempt
@handle_lti_exceptions
def configure_delivery(request):
    """
    List the deliveries a link can launch, or assign one to the link of the session.
    """
    lti_session = _require_lti_session(request)
    if not has_access(lti_session.get_user(), ACTION_CONFIGURE_DELIVERY):
        raise LtiException(_('Access to this functionality is restricted'), LtiErrorMessage.ERROR_UNAUTHORIZED)

    link = lti_session.get_lti_link_resource()
    if link is None:
        raise LtiException(_('LTI link of the current session not found'), LtiErrorMessage.ERROR_INVALID_PARAMETER)

    if request.method == 'POST':
        delivery = Delivery.objects.filter(uri=request.POST.get('delivery')).first()
        if delivery is None:
            raise LtiException(
                _('Delivery does not exist. Please contact your instructor.'),
                LtiErrorMessage.ERROR_INVALID_PARAMETER,
            )
        link.delivery = delivery
        link.save(update_fields=['delivery'])
        log.info("LTI link %s configured to launch delivery %s", link.pk, delivery.uri)
        return redirect(get_url('show_delivery', {'uri': delivery.get_uri()}))

    return JsonResponse({
        'link': link.resource_link_id,
        'selected': link.delivery.uri if link.delivery else None,
        'deliveries': [
            {'uri': delivery.uri, 'label': delivery.label}
            for delivery in Delivery.objects.order_by('label', 'uri')
        ],
    })


@require_http_methods(["GET"])
@xframe_options_exempt
@handle_lti_exceptions
def show_delivery(request):
    """
    Describe the delivery a link launches, for instructors.
    """
    lti_session = _require_lti_session(request)
    if not has_access(lti_session.get_user(), ACTION_CONFIGURE_DELIVERY):
        raise LtiException(_('Access to this functionality is restricted'), LtiErrorMessage.ERROR_UNAUTHORIZED)

    delivery = Delivery.objects.filter(uri=request.GET.get('uri')).first()
    if delivery is None:
        raise LtiException(
            _('Delivery does not exist. Please contact your instructor.'),
            LtiErrorMessage.ERROR_INVALID_PARAMETER,
        )

    link = lti_session.get_lti_link_resource()
    return JsonResponse({
        'uri': delivery.uri,
        'label': delivery.label,
        'max_executions': delivery.max_executions,
        'executions': delivery.executions.count(),
        'linked': bool(link and link.delivery_id == delivery.pk),
    })


@require_http_methods(["GET"])
@xframe_options_exempt
@handle_lti_exceptions
def run_delivery_execution(request):
    """
    Hand a learner's execution over to the test runner.
    """
    lti_session = _require_lti_session(request)
    user = lti_session.get_user()
    if not has_access(user, ACTION_RUN_DELIVERY_EXECUTION):
        raise LtiException(_('Access to this functionality is restricted'), LtiErrorMessage.ERROR_UNAUTHORIZED)

    try:
        delivery_execution = DeliveryExecution.objects.select_related('delivery').get(
            identifier=get_request_parameter(request, 'deliveryExecution'),
            user_id=user.get_identifier(),
        )
    except (DeliveryExecution.DoesNotExist, ValidationError) as exc:
        raise LtiException(
            _('User is not authorized to run this delivery'),
            LtiErrorMessage.ERROR_LAUNCH_FORBIDDEN,
        ) from exc

    if delivery_execution.is_final():
        return redirect(LtiNavigationService().get_return_url(user.get_launch_data(), delivery_execution))

    if delivery_execution.get_state() == STATE_PAUSED:
        StateService().start(delivery_execution)

    return render(request, 'lti_delivery_provider/runner.html', {
        'delivery_execution': delivery_execution,
        'delivery': delivery_execution.delivery,
    })


@require_http_methods(["GET"])
@xframe_options_exempt
@handle_lti_exceptions
def lti_overview(request):
    """
    List the past executions of the delivery for a learner who cannot resume one.
    """
    lti_session = _require_lti_session(request)
    delivery = _get_delivery(request, lti_session)
    if delivery is None:
        raise LtiException(
            _('Delivery does not exist. Please contact your instructor.'),
            LtiErrorMessage.ERROR_INVALID_PARAMETER,
        )

    user = lti_session.get_user()
    executions = LtiDeliveryExecutionService().get_linked_delivery_executions(
        delivery,
        lti_session.get_lti_link_resource(),
        user.get_identifier(),
    )
    return render(request, 'lti_delivery_provider/overview.html', {
        'delivery': delivery,
        'executions': executions,
        'can_start': LtiAssignment().is_delivery_execution_allowed(delivery.get_uri(), user),
        'start_url': get_url('start_delivery_execution', {'delivery': delivery.get_uri()}),
        'return_url': user.get_launch_data().get_return_url(),
    })


@require_http_methods(["POST"])
@xframe_options_exempt
@handle_lti_exceptions
def start_delivery_execution(request):
    """
    Start a new execution of the delivery from the overview page.
    """
    lti_session = _require_lti_session(request)
    user = lti_session.get_user()
    if not has_access(user, ACTION_RUN_DELIVERY_EXECUTION):
        raise LtiException(_('Access to this functionality is restricted'), LtiErrorMessage.ERROR_UNAUTHORIZED)

    delivery = _get_delivery(request, lti_session)
    if delivery is None:
        raise LtiException(
            _('Delivery does not exist. Please contact your instructor.'),
            LtiErrorMessage.ERROR_INVALID_PARAMETER,
        )

    try:
        delivery_execution = LtiDeliveryExecutionService().start_new_delivery_execution(delivery, lti_session)
    except QtiTestExtractionFailedException as exc:
        log.info(str(exc))
        raise LtiException(str(exc)) from exc
    except ActionFullException as exc:
        return redirect(get_url('launch_queue', {
            'position': exc.position,
            'delivery': delivery.get_uri(),
        }))

    if delivery_execution is None:
        raise LtiException(
            _('User is not authorized to run this delivery'),
            LtiErrorMessage.ERROR_LAUNCH_FORBIDDEN,
        )
    return redirect(get_url('run_delivery_execution', {'deliveryExecution': delivery_execution.get_identifier()}))


@require_http_methods(["GET"])
@xframe_options_exempt
@handle_lti_exceptions
def thank_you(request):
    """
    Final screen of a delivery.
    """
    launch_data = _require_lti_session(request).get_launch_data()
    return render(request, 'lti_delivery_provider/thank_you.html', {
        'message': launch_data.variables.get(PARAM_THANKYOU_MESSAGE) or _('Thank you'),
        'return_url': launch_data.get_return_url(),
    })
