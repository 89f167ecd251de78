"""
Assignment rules deciding whether a user may start a new delivery execution.
"""
import logging

from lti_delivery_provider.models import Delivery, DeliveryExecution

log = logging.getLogger(__name__)


class LtiAssignment:
    """
    Every LTI user is assigned to the delivery of the link they launch, within
    the execution limit of that delivery.
    """

    def is_delivery_execution_allowed(self, delivery_uri, user):
        """
        Return True if ``user`` may start a new execution of the delivery ``delivery_uri``.
        """
        delivery = Delivery.objects.filter(uri=delivery_uri).first()
        if delivery is None:
            log.info("Delivery %s does not exist, refusing new execution", delivery_uri)
            return False

        if not delivery.max_executions:
            return True

        used = DeliveryExecution.objects.filter(delivery=delivery, user_id=user.get_identifier()).count()
        if used >= delivery.max_executions:
            log.info(
                "User %s used %s of %s executions of delivery %s",
                user.get_identifier(),
                used,
                delivery.max_executions,
                delivery_uri,
            )
            return False
        return True
