"""
Constants shared by the LTI delivery provider.
"""

# Launch variables that tune the delivery tool behaviour.

# Setting this parameter to 'true' will prevent resuming a test session in progress
# and will start a new test session whenever the lti tool is launched
PARAM_FORCE_RESTART = 'custom_force_restart'

# Setting this parameter to 'true' will prevent the thank you screen to be shown after
# the test and skip directly to the return url
PARAM_SKIP_THANKYOU = 'custom_skip_thankyou'

# Setting this parameter to 'true' will prevent the 'You have already taken this test'
# screen to be shown and skip directly to the return url
PARAM_SKIP_OVERVIEW = 'custom_skip_overview'

# Setting this parameter to a string will show this string as the title of the thank you
# page. (no effect if PARAM_SKIP_THANKYOU is set to 'true')
PARAM_THANKYOU_MESSAGE = 'custom_message'

# Delivery uri passed by the consumer, takes precedence over the delivery configured on the link
PARAM_DELIVERY = 'custom_delivery'

# Standard LTI launch variables
LTI_USER_ID = 'user_id'
LTI_ROLES = 'roles'
LTI_RESOURCE_LINK_ID = 'resource_link_id'
LTI_CONSUMER_KEY = 'oauth_consumer_key'
LTI_RETURN_URL = 'launch_presentation_return_url'
LTI_LOCALE = 'launch_presentation_locale'
LTI_MESSAGE_TYPE = 'lti_message_type'

LTI_1P1_MESSAGE_TYPE = 'basic-lti-launch-request'


class LtiRoles:
    """
    Role vocabulary understood by the delivery tool.
    """
    CONTEXT_LEARNER = 'urn:lti:role:ims/lis/Learner'
    CONTEXT_INSTRUCTOR = 'urn:lti:role:ims/lis/Instructor'
    CONTEXT_CONTENT_DEVELOPER = 'urn:lti:role:ims/lis/ContentDeveloper'
    CONTEXT_ADMINISTRATOR = 'urn:lti:role:ims/lis/Administrator'

    CONTEXT_LTI1P3_LEARNER = 'http://purl.imsglobal.org/vocab/lis/v2/membership#Learner'
    CONTEXT_LTI1P3_INSTRUCTOR = 'http://purl.imsglobal.org/vocab/lis/v2/membership#Instructor'
    CONTEXT_LTI1P3_CONTENT_DEVELOPER = 'http://purl.imsglobal.org/vocab/lis/v2/membership#ContentDeveloper'
    CONTEXT_LTI1P3_ADMINISTRATOR = 'http://purl.imsglobal.org/vocab/lis/v2/membership#Administrator'

    LEARNER_ROLES = (CONTEXT_LEARNER, CONTEXT_LTI1P3_LEARNER)


class LtiErrorMessage:
    """
    Error codes reported back to the tool consumer.
    """
    ERROR_UNAUTHORIZED = 'unauthorized'
    ERROR_INVALID_PARAMETER = 'invalid_parameter'
    ERROR_LAUNCH_FORBIDDEN = 'launch_forbidden'
    ERROR_SESSION_NOT_FOUND = 'session_not_found'


# Delivery execution states
STATE_ACTIVE = 'http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusActive'
STATE_PAUSED = 'http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusPaused'
STATE_FINISHED = 'http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusFinished'
STATE_TERMINATED = 'http://www.tao.lu/Ontologies/TAODelivery.rdf#DeliveryExecutionStatusTerminated'

ACTIVE_STATES = (STATE_ACTIVE, STATE_PAUSED)
FINAL_STATES = (STATE_FINISHED, STATE_TERMINATED)

# Session key holding the serialized LTI session
LTI_SESSION_KEY = 'lti_delivery_provider.lti_session'

# Seconds a queued launch is kept before it is forgotten
DEFAULT_QUEUE_TTL = 300

# Maximum age of an LTI 1.1 oauth_timestamp
OAUTH_TIMESTAMP_TOLERANCE = 300
