"""
Delivery executions started through LTI links.
"""
import logging

from django.db import transaction

from lti_delivery_provider.assignment import LtiAssignment
from lti_delivery_provider.capacity import InstantActionQueue, StartDeliveryExecutionAction
from lti_delivery_provider.constants import PARAM_FORCE_RESTART
from lti_delivery_provider.exceptions import ActionFullException, LtiException, QtiTestExtractionFailedException
from lti_delivery_provider.state import StateService
from lti_delivery_provider.tool import LtiDeliveryTool

log = logging.getLogger(__name__)


class LtiDeliveryExecutionService:
    """
    Finds the execution a launch should continue, or starts a new one.
    """

    def __init__(self, tool=None, state_service=None, action_queue=None, assignment=None):
        self.tool = tool or LtiDeliveryTool()
        self.state_service = state_service or StateService()
        self.action_queue = action_queue or InstantActionQueue()
        self.assignment = assignment or LtiAssignment()

    def get_linked_delivery_executions(self, delivery, link, user_id):
        """
        Return the executions of ``delivery`` started by the user from ``link``, oldest first.
        """
        if link is None:
            return []
        return self.tool.get_linked_delivery_executions(delivery, link, user_id)

    def get_active_delivery_execution(self, delivery, lti_session):
        """
        Return the execution the launch should run, or None when there is nothing to resume.

        The last linked execution is resumed while it is active or paused. A
        new execution is started on the first launch of the link, or when the
        consumer sent ``custom_force_restart=true`` (the execution in progress
        is finished once the new one exists). Once every execution is
        finished, None is returned and the learner decides from the overview.
        """
        user = lti_session.get_user()
        launch_data = lti_session.get_launch_data()
        link = lti_session.get_lti_link_resource()

        executions = self.get_linked_delivery_executions(delivery, link, user.get_identifier())
        last_execution = executions[-1] if executions else None

        if launch_data.get_boolean_variable(PARAM_FORCE_RESTART):
            return self.start_new_delivery_execution(delivery, lti_session, previous_execution=last_execution)

        if last_execution is not None and last_execution.is_active():
            return last_execution

        if not executions:
            return self.start_new_delivery_execution(delivery, lti_session)

        return None

    def start_new_delivery_execution(self, delivery, lti_session, previous_execution=None):
        """
        Start a new execution through the action queue, or return None if the user may not start one.

        Raises ActionFullException with the user's queue position when the platform is full.
        ``previous_execution`` is finished only once the new execution exists.
        """
        user = lti_session.get_user()
        if not self.assignment.is_delivery_execution_allowed(delivery.get_uri(), user):
            return None

        action = StartDeliveryExecutionAction(
            lambda: self.start_delivery_execution(delivery, lti_session, previous_execution),
            user.get_identifier(),
        )
        if not self.action_queue.perform(action):
            raise ActionFullException(self.action_queue.get_position(action))
        return action.get_result()

    def start_delivery_execution(self, delivery, lti_session, previous_execution=None):
        """
        Create an execution of ``delivery`` for the session user and link it to the session link.

        An active or paused ``previous_execution`` is finished in the same transaction.
        """
        if not delivery.runtime:
            raise QtiTestExtractionFailedException(
                f"Unable to extract the compiled test of delivery {delivery.get_uri()}"
            )

        link = lti_session.get_lti_link_resource()
        if link is None:
            raise LtiException('LTI link of the current session not found')

        user_id = lti_session.get_user().get_identifier()
        with transaction.atomic():
            delivery_execution = self.state_service.create(delivery, user_id)
            self.tool.link_delivery_execution(link, user_id, delivery_execution)
            if previous_execution is not None and previous_execution.is_active():
                log.info(
                    "Force restart requested, finishing delivery execution %s",
                    previous_execution.identifier,
                )
                self.state_service.finish(previous_execution)
        return delivery_execution
