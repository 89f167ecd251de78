"""
Utility functions for the LTI delivery provider
"""
import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from django.urls import reverse
from edx_django_utils.cache import TieredCache, get_cache_key

from lti_delivery_provider.lti_1p3.exceptions import InvalidClaimValue, MissingRequiredClaim

log = logging.getLogger(__name__)

URL_NAMESPACE = 'lti_delivery_provider'


def get_url(action, params=None):
    """
    Return the path of one of the delivery provider views, with ``params`` as query string.

    :param action: view name without the namespace, e.g. ``run``
    :param params: dict of query parameters
    """
    url = reverse(f'{URL_NAMESPACE}:{URL_NAMESPACE}.{action}')
    if params:
        url = f'{url}?{urlencode(params)}'
    return url


def add_query_params(url, params):
    """
    Return ``url`` with ``params`` added to its query string, keeping the existing ones.
    """
    scheme, netloc, path, query, fragment = urlsplit(url)
    query_params = parse_qsl(query, keep_blank_values=True)
    query_params.extend(
        (key, value)
        for key, value in params.items()
        if value is not None
    )
    return urlunsplit((scheme, netloc, path, urlencode(query_params), fragment))


def get_request_parameter(request, name, default=None):
    """
    Return a request parameter from the query string, falling back to the form body.
    """
    if name in request.GET:
        return request.GET[name]
    if request.method == 'POST' and name in request.POST:
        return request.POST[name]
    return default


def has_request_parameter(request, name):
    return get_request_parameter(request, name) is not None


def get_data_from_cache(cache_key):
    """
    Return data stored in the cache with the cache key, if it exists. If not, return none.

    Arguments:
    cache_key: the key for the data in the cache
    """
    cached_data = TieredCache.get_cached_response(cache_key)

    if cached_data.is_found:
        return cached_data.value

    return None


def set_data_in_cache(cache_key, data, timeout):
    TieredCache.set_all_tiers(cache_key, data, django_cache_timeout=timeout)


def get_action_queue_cache_key(action_id):
    """
    Return the cache key holding the queue of an action.
    """
    return get_cache_key(app="lti_delivery_provider", key="action_queue", action_id=action_id)


def get_nonce_cache_key(consumer, nonce):
    """
    Return the cache key used to remember a launch nonce.
    """
    return get_cache_key(app="lti_delivery_provider", key="nonce", consumer=consumer, nonce=nonce)


def check_token_claim(token, claim_key, expected_value=None, invalid_claim_error_msg=None):
    """
    Checks that the claim with key claim_key appears in the token. Raises a MissingRequiredClaim exception if it does
    not. If the optional arguments expected_value and invalid_claim_error_msg are provided, then checks that the claim
    in the token with the key claim_key matches the expected_value. Raises an InvalidClaimValue exception with the
    invalid_claim_error_msg as the message if not. If the invalid_claim_error_msg argument is provided, then a generic
    message is used.
    """
    claim_value = token.get(claim_key)

    if claim_value is None:
        raise MissingRequiredClaim(f"Token is missing required {claim_key} claim.")
    if expected_value and claim_value != expected_value:
        msg = invalid_claim_error_msg if invalid_claim_error_msg else f"The claim {claim_key} value is invalid."
        raise InvalidClaimValue(msg)
