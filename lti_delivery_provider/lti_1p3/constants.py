"""
LTI 1.3 Constants definition file

Claims read from the id_token of a resource link launch, and the
values the delivery tool accepts for them.
"""

# http://www.imsglobal.org/spec/lti/v1p3/#message-type-claim
CLAIM_MESSAGE_TYPE = 'https://purl.imsglobal.org/spec/lti/claim/message_type'
# http://www.imsglobal.org/spec/lti/v1p3/#lti-version-claim
CLAIM_VERSION = 'https://purl.imsglobal.org/spec/lti/claim/version'
# http://www.imsglobal.org/spec/lti/v1p3/#lti-deployment-id-claim
CLAIM_DEPLOYMENT_ID = 'https://purl.imsglobal.org/spec/lti/claim/deployment_id'
# http://www.imsglobal.org/spec/lti/v1p3/#resource-link-claim
CLAIM_RESOURCE_LINK = 'https://purl.imsglobal.org/spec/lti/claim/resource_link'
# http://www.imsglobal.org/spec/lti/v1p3/#roles-claim
CLAIM_ROLES = 'https://purl.imsglobal.org/spec/lti/claim/roles'
# http://www.imsglobal.org/spec/lti/v1p3/#launch-presentation-claim
CLAIM_LAUNCH_PRESENTATION = 'https://purl.imsglobal.org/spec/lti/claim/launch_presentation'
# http://www.imsglobal.org/spec/lti/v1p3/#custom-properties-and-variable-substitution
CLAIM_CUSTOM = 'https://purl.imsglobal.org/spec/lti/claim/custom'

LTI_1P3_VERSION = '1.3.0'
LTI_1P3_RESOURCE_LINK_REQUEST = 'LtiResourceLinkRequest'

LTI_1P3_REQUIRED_CLAIMS = (
    'iss',
    'aud',
    'sub',
    'nonce',
    CLAIM_MESSAGE_TYPE,
    CLAIM_VERSION,
    CLAIM_DEPLOYMENT_ID,
    CLAIM_RESOURCE_LINK,
    CLAIM_ROLES,
)

# Seconds a nonce is remembered to reject replayed id_tokens
LTI_1P3_NONCE_TTL = 3600
