"""
LTI session handling.

The LTI session lives in the Django session of the browser that performed the
launch. It holds the launch variables, the user they describe and the link the
launch came from.
"""
import logging

from attrs import asdict, define, field

from lti_delivery_provider.constants import LTI_CONSUMER_KEY, LTI_SESSION_KEY
from lti_delivery_provider.data import LtiLaunchData, LtiUser
from lti_delivery_provider.models import LtiLink

log = logging.getLogger(__name__)


@define
class LtiSession:
    """
    State of an LTI launch for the current browser session.
    """
    user = field()
    link_id = field(default=None)

    @property
    def launch_data(self):
        return self.user.launch_data

    def get_user(self):
        return self.user

    def get_launch_data(self):
        return self.user.launch_data

    def get_lti_link_resource(self):
        """
        Return the LtiLink the launch came from, or None if it no longer exists.
        """
        if self.link_id is None:
            return None
        return LtiLink.objects.filter(pk=self.link_id).select_related('delivery').first()

    def to_dict(self):
        return {
            'user_id': self.user.identifier,
            'roles': list(self.user.roles),
            'launch_data': asdict(self.user.launch_data),
            'link_id': self.link_id,
        }

    @classmethod
    def from_dict(cls, data):
        launch_data = LtiLaunchData(**data['launch_data'])
        user = LtiUser(
            identifier=data['user_id'],
            roles=data['roles'],
            launch_data=launch_data,
        )
        return cls(user=user, link_id=data.get('link_id'))


def _start_session(request, launch_data, consumer):
    """
    Store a new LTI session built from ``launch_data``.

    The LtiLink for the consumer and resource link id is created on its first launch.
    """
    link, created = LtiLink.objects.get_or_create(
        consumer=consumer,
        resource_link_id=launch_data.get_resource_link_id(),
    )
    if created:
        log.info("Created LTI link %s for consumer %s", link.resource_link_id, consumer)

    lti_session = LtiSession(user=LtiUser.from_launch_data(launch_data), link_id=link.pk)

    # Rotate the session key on every launch
    request.session.cycle_key()
    request.session[LTI_SESSION_KEY] = lti_session.to_dict()
    return lti_session


def start_lti1p1_session(request, launch_data):
    """
    Start an LTI session from verified LTI 1.1 launch data.
    """
    return _start_session(request, launch_data, launch_data.get_variable(LTI_CONSUMER_KEY))


def start_lti1p3_session(request, message):
    """
    Start an LTI session from a validated LTI 1.3 launch message.

    The issuer identifies the consumer of LTI 1.3 links.
    """
    return _start_session(request, LtiLaunchData.from_lti1p3_message(message), message['iss'])


def get_lti_session(request):
    """
    Return the LtiSession of the request, or None if no launch happened in this session.
    """
    data = request.session.get(LTI_SESSION_KEY)
    if not data:
        return None
    try:
        return LtiSession.from_dict(data)
    except (KeyError, TypeError):
        log.warning("Discarding malformed LTI session data", exc_info=True)
        return None


def end_lti_session(request):
    request.session.pop(LTI_SESSION_KEY, None)
