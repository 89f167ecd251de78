"""
Resolution of the delivery an LTI launch targets.
"""
import logging

from lti_delivery_provider.constants import PARAM_DELIVERY
from lti_delivery_provider.models import Delivery
from lti_delivery_provider.tool import LtiDeliveryTool

log = logging.getLogger(__name__)


class LtiLaunchDataService:
    """
    Finds the delivery of a launch.
    """

    def __init__(self, tool=None):
        self.tool = tool or LtiDeliveryTool()

    def find_delivery_from_launch_data(self, launch_data, link=None):
        """
        Return the delivery targeted by the launch, or None.

        A ``custom_delivery`` launch variable takes precedence over the
        delivery configured on the link.
        """
        if launch_data.has_variable(PARAM_DELIVERY):
            delivery_uri = launch_data.get_variable(PARAM_DELIVERY)
            delivery = Delivery.objects.filter(uri=delivery_uri).first()
            if delivery is None:
                log.info("Delivery %s sent in launch data does not exist", delivery_uri)
            return delivery

        return self.tool.get_delivery_from_link(link)
