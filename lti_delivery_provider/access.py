"""
Role based access to the delivery tool actions.

Each action is allowed to a list of LTI roles. The defaults can be replaced
per action with the ``LTI_DELIVERY_PROVIDER_ACCESS_RULES`` setting, e.g.::

    LTI_DELIVERY_PROVIDER_ACCESS_RULES = {
        'configure_delivery': ['urn:lti:role:ims/lis/Administrator'],
    }
"""
from django.conf import settings

from lti_delivery_provider.constants import LtiRoles

ACTION_CONFIGURE_DELIVERY = 'configure_delivery'
ACTION_RUN_DELIVERY_EXECUTION = 'run_delivery_execution'

DEFAULT_ACCESS_RULES = {
    ACTION_CONFIGURE_DELIVERY: [
        LtiRoles.CONTEXT_INSTRUCTOR,
        LtiRoles.CONTEXT_CONTENT_DEVELOPER,
        LtiRoles.CONTEXT_ADMINISTRATOR,
        LtiRoles.CONTEXT_LTI1P3_INSTRUCTOR,
        LtiRoles.CONTEXT_LTI1P3_CONTENT_DEVELOPER,
        LtiRoles.CONTEXT_LTI1P3_ADMINISTRATOR,
    ],
    ACTION_RUN_DELIVERY_EXECUTION: [
        LtiRoles.CONTEXT_LEARNER,
        LtiRoles.CONTEXT_LTI1P3_LEARNER,
        # Dry runs
        LtiRoles.CONTEXT_LTI1P3_INSTRUCTOR,
    ],
}


def get_allowed_roles(action):
    rules = getattr(settings, 'LTI_DELIVERY_PROVIDER_ACCESS_RULES', {}) or {}
    if action in rules:
        return list(rules[action])
    return list(DEFAULT_ACCESS_RULES.get(action, []))


def has_access(user, action):
    """
    Return True if the LTI user holds one of the roles allowed to perform ``action``.
    """
    if user is None:
        return False
    return user.has_any_role(get_allowed_roles(action))
