"""
Delivery execution state changes.
"""
import logging

from django.utils import timezone

from lti_delivery_provider.constants import (
    FINAL_STATES,
    STATE_ACTIVE,
    STATE_FINISHED,
    STATE_PAUSED,
    STATE_TERMINATED,
)
from lti_delivery_provider.models import DeliveryExecution

log = logging.getLogger(__name__)


class StateService:
    """
    Moves delivery executions between states.

    Finished and terminated executions are final and never change again.
    """

    def create(self, delivery, user_id):
        """
        Create a new active execution of ``delivery`` for ``user_id``.
        """
        delivery_execution = DeliveryExecution.objects.create(
            delivery=delivery,
            user_id=user_id,
            state=STATE_ACTIVE,
        )
        log.info(
            "Delivery execution %s of delivery %s created for user %s",
            delivery_execution.identifier,
            delivery.uri,
            user_id,
        )
        return delivery_execution

    def start(self, delivery_execution):
        """
        Resume a paused execution.
        """
        return self._set_state(delivery_execution, STATE_ACTIVE)

    def pause(self, delivery_execution):
        return self._set_state(delivery_execution, STATE_PAUSED)

    def finish(self, delivery_execution):
        return self._set_state(delivery_execution, STATE_FINISHED)

    def terminate(self, delivery_execution):
        return self._set_state(delivery_execution, STATE_TERMINATED)

    def _set_state(self, delivery_execution, state):
        """
        Store the new state, returning False when the execution is already final.
        """
        if delivery_execution.state in FINAL_STATES:
            log.warning(
                "Delivery execution %s is in final state %s, refusing to move it to %s",
                delivery_execution.identifier,
                delivery_execution.state,
                state,
            )
            return False

        previous_state = delivery_execution.state
        delivery_execution.state = state
        update_fields = ['state']
        if state in FINAL_STATES:
            delivery_execution.finished_at = timezone.now()
            update_fields.append('finished_at')
        delivery_execution.save(update_fields=update_fields)

        log.info(
            "Delivery execution %s moved from %s to %s",
            delivery_execution.identifier,
            previous_state,
            state,
        )
        return True
