"""
Accessor for the links between LTI resource links, deliveries and delivery executions.
"""
import logging

from lti_delivery_provider.exceptions import InconsistentData
from lti_delivery_provider.models import DeliveryExecution, LtiDeliveryExecutionLink

log = logging.getLogger(__name__)


class LtiDeliveryTool:
    """
    The delivery tool as seen from the LTI links.

    Each launch happens through an ``LtiLink``. The link may point to a
    delivery, and every execution started from it is recorded together with
    the user that started it.
    """

    def get_delivery_from_link(self, link):
        """
        Return the delivery configured on the link, or None if the link was never configured.
        """
        if link is None:
            return None
        return link.delivery

    def link_delivery_execution(self, link, user_id, delivery_execution):
        """
        Record that ``user_id`` started ``delivery_execution`` from ``link``.
        """
        execution_link = LtiDeliveryExecutionLink.objects.create(
            user_id=user_id,
            link=link,
            delivery_execution=delivery_execution,
        )
        log.info(
            "Linked delivery execution %s to LTI link %s for user %s",
            delivery_execution.identifier,
            link.pk,
            user_id,
        )
        return isinstance(execution_link, LtiDeliveryExecutionLink)

    def get_delivery_execution(self, link, user_id):
        """
        Return the single execution linked to the user on that link, or None.

        Raises InconsistentData when more than one execution is linked.
        """
        candidates = list(
            LtiDeliveryExecutionLink.objects.filter(user_id=user_id, link=link).select_related('delivery_execution')
        )
        if not candidates:
            return None
        if len(candidates) > 1:
            raise InconsistentData(
                f"{len(candidates)} delivery executions are linked to user {user_id} on link {link.pk}"
            )
        return candidates[0].delivery_execution

    def get_linked_delivery_executions(self, delivery, link, user_id):
        """
        Return the executions of ``delivery`` the user started from ``link``, oldest first.
        """
        return list(
            DeliveryExecution.objects.filter(
                delivery=delivery,
                lti_links__link=link,
                lti_links__user_id=user_id,
            ).distinct().order_by('started_at', 'pk')
        )
