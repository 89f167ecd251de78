"""
Capacity of the delivery platform and the queue of launches waiting for it.
"""
import logging
import time

from django.conf import settings

from lti_delivery_provider.constants import DEFAULT_QUEUE_TTL, STATE_ACTIVE
from lti_delivery_provider.models import DeliveryExecution
from lti_delivery_provider.utils import get_action_queue_cache_key, get_data_from_cache, set_data_in_cache

log = logging.getLogger(__name__)


class CapacityService:
    """
    Number of delivery executions the platform can still start.

    The limit is read from the ``LTI_DELIVERY_PROVIDER_CAPACITY_LIMIT``
    setting. A missing or negative limit means unlimited capacity.
    """
    UNLIMITED = -1

    def get_limit(self):
        limit = getattr(settings, 'LTI_DELIVERY_PROVIDER_CAPACITY_LIMIT', None)
        if limit is None:
            return self.UNLIMITED
        limit = int(limit)
        if limit < 0:
            return self.UNLIMITED
        return limit

    def get_capacity(self):
        """
        Return -1 for unlimited capacity, or the number of free slots.
        """
        limit = self.get_limit()
        if limit == self.UNLIMITED:
            return self.UNLIMITED
        active = DeliveryExecution.objects.filter(state=STATE_ACTIVE).count()
        return max(limit - active, 0)

    def has_capacity(self):
        capacity = self.get_capacity()
        return capacity == self.UNLIMITED or capacity > 0


class StartDeliveryExecutionAction:
    """
    Queued action starting a delivery execution for a user.
    """
    action_id = 'start_delivery_execution'

    def __init__(self, start, user_id):
        self._start = start
        self.user_id = user_id
        self.result = None

    def __call__(self):
        self.result = self._start()
        return self.result

    def get_result(self):
        return self.result


class InstantActionQueue:
    """
    Runs actions immediately while capacity allows, otherwise queues the user.

    The queue of each action is a list of ``[user_id, queued_at]`` entries kept
    in the cache. Entries older than the TTL are dropped, so users who left the
    queue page stop blocking the others.
    """

    def __init__(self, capacity_service=None, ttl=None):
        self.capacity_service = capacity_service or CapacityService()
        if ttl is None:
            ttl = int(getattr(settings, 'LTI_DELIVERY_PROVIDER_QUEUE_TTL', DEFAULT_QUEUE_TTL))
        self.ttl = ttl

    def perform(self, action):
        """
        Run ``action`` if there is capacity and return True, else queue its user and return False.
        """
        if self.capacity_service.has_capacity():
            action()
            self._dequeue(action)
            return True

        self._enqueue(action)
        log.info(
            "No capacity to perform %s for user %s, queued at position %s",
            action.action_id,
            action.user_id,
            self.get_position(action),
        )
        return False

    def get_position(self, action):
        """
        Return the 1-based position of the action's user in the queue, 0 if not queued.
        """
        for index, (user_id, __) in enumerate(self._get_queue(action)):
            if user_id == action.user_id:
                return index + 1
        return 0

    def _get_queue(self, action):
        queue = get_data_from_cache(get_action_queue_cache_key(action.action_id)) or []
        now = time.time()
        return [entry for entry in queue if now - entry[1] < self.ttl]

    def _save_queue(self, action, queue):
        set_data_in_cache(get_action_queue_cache_key(action.action_id), queue, self.ttl)

    def _enqueue(self, action):
        queue = self._get_queue(action)
        now = time.time()
        for entry in queue:
            if entry[0] == action.user_id:
                entry[1] = now
                break
        else:
            queue.append([action.user_id, now])
        self._save_queue(action, queue)

    def _dequeue(self, action):
        queue = self._get_queue(action)
        remaining = [entry for entry in queue if entry[0] != action.user_id]
        if len(remaining) != len(queue):
            self._save_queue(action, remaining)
