"""
This module provides the data structures representing an LTI launch on the tool side: the launch variables sent by the
consumer and the user they describe.
"""
from attrs import define, field

from lti_delivery_provider.constants import (
    LTI_LOCALE,
    LTI_RESOURCE_LINK_ID,
    LTI_RETURN_URL,
    LTI_ROLES,
    LTI_USER_ID,
    LtiRoles,
)
from lti_delivery_provider.exceptions import LtiVariableMissingException
from lti_delivery_provider.lti_1p3 import constants as lti_1p3_constants

# LTI 1.1 short role names and their full vocabulary equivalent
LTI_1P1_ROLE_MAP = {
    'Learner': LtiRoles.CONTEXT_LEARNER,
    'Instructor': LtiRoles.CONTEXT_INSTRUCTOR,
    'ContentDeveloper': LtiRoles.CONTEXT_CONTENT_DEVELOPER,
    'Administrator': LtiRoles.CONTEXT_ADMINISTRATOR,
}


def normalize_roles(roles):
    """
    Return roles as a list of full role URIs.

    Accepts the comma separated string sent in LTI 1.1 launches as well as
    the list sent in the LTI 1.3 roles claim. Short LTI 1.1 names such as
    ``Learner`` are expanded to ``urn:lti:role:ims/lis/Learner``.
    """
    if not roles:
        return []
    if isinstance(roles, str):
        roles = roles.split(',')

    normalized = []
    for role in roles:
        role = role.strip()
        if not role:
            continue
        role = LTI_1P1_ROLE_MAP.get(role, role)
        if role not in normalized:
            normalized.append(role)
    return normalized


@define
class LtiLaunchData:
    """
    Variables of an LTI launch.

    * variables: the launch parameters as sent by the consumer. For LTI 1.3 launches the claims are flattened to
        their LTI 1.1 names (custom claims become ``custom_*`` variables) so both versions are read the same way.
    * lti_version: ``1.1`` or ``1.3``.
    """
    variables = field(factory=dict)
    lti_version = field(default='1.1')

    @classmethod
    def from_request_params(cls, params):
        """
        Build launch data from the POST parameters of an LTI 1.1 launch.
        """
        variables = {
            key: value
            for key, value in params.items()
            if key != 'oauth_signature'
        }
        return cls(variables=variables, lti_version='1.1')

    @classmethod
    def from_lti1p3_message(cls, message):
        """
        Build launch data from a validated LTI 1.3 id_token payload.
        """
        variables = {
            LTI_USER_ID: message.get('sub'),
            LTI_ROLES: ','.join(message.get(lti_1p3_constants.CLAIM_ROLES, [])),
        }

        resource_link = message.get(lti_1p3_constants.CLAIM_RESOURCE_LINK) or {}
        if resource_link.get('id'):
            variables[LTI_RESOURCE_LINK_ID] = resource_link['id']

        presentation = message.get(lti_1p3_constants.CLAIM_LAUNCH_PRESENTATION) or {}
        if presentation.get('return_url'):
            variables[LTI_RETURN_URL] = presentation['return_url']
        if presentation.get('locale'):
            variables[LTI_LOCALE] = presentation['locale']

        for key, value in (message.get(lti_1p3_constants.CLAIM_CUSTOM) or {}).items():
            variables[f'custom_{key}'] = str(value)

        return cls(variables=variables, lti_version='1.3')

    def has_variable(self, name):
        return name in self.variables

    def get_variable(self, name):
        """
        Return the launch variable, raising LtiVariableMissingException if the consumer did not send it.
        """
        try:
            return self.variables[name]
        except KeyError as exc:
            raise LtiVariableMissingException(name) from exc

    def get_boolean_variable(self, name):
        """
        True only when the variable was sent with the value 'true'.
        """
        return str(self.variables.get(name, '')).lower() == 'true'

    def has_return_url(self):
        return bool(self.variables.get(LTI_RETURN_URL))

    def get_return_url(self):
        return self.variables.get(LTI_RETURN_URL)

    def get_user_id(self):
        return self.get_variable(LTI_USER_ID)

    def get_resource_link_id(self):
        return self.get_variable(LTI_RESOURCE_LINK_ID)

    def get_roles(self):
        return normalize_roles(self.variables.get(LTI_ROLES))

    def get_language(self):
        return self.variables.get(LTI_LOCALE)


@define
class LtiUser:
    """
    The user launching the tool, as described by the consumer.
    """
    identifier = field()
    roles = field(factory=list, converter=normalize_roles)
    launch_data = field(factory=LtiLaunchData)

    @classmethod
    def from_launch_data(cls, launch_data):
        return cls(
            identifier=launch_data.get_user_id(),
            roles=launch_data.get_roles(),
            launch_data=launch_data,
        )

    def get_identifier(self):
        return self.identifier

    def get_roles(self):
        return list(self.roles)

    def get_launch_data(self):
        return self.launch_data

    def get_language(self):
        return self.launch_data.get_language()

    def has_any_role(self, roles):
        return any(role in self.roles for role in roles)
