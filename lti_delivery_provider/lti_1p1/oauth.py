"""
Utility functions for verifying the OAuth signature of LTI 1.1 launches.
"""

import logging
import time
import urllib.parse

from oauthlib import oauth1

from lti_delivery_provider.constants import OAUTH_TIMESTAMP_TOLERANCE
from lti_delivery_provider.utils import get_data_from_cache, get_nonce_cache_key, set_data_in_cache

from .exceptions import Lti1p1Error

log = logging.getLogger(__name__)


class SignedRequest:
    """
    Encapsulates request attributes needed when working
    with the `oauthlib.oauth1` API
    """
    def __init__(self, **kwargs):
        self.uri = kwargs.get('uri')
        self.http_method = kwargs.get('http_method')
        self.params = kwargs.get('params')
        self.signature = kwargs.get('signature')


def get_launch_oauth_params(request):
    """
    Return every parameter taking part in the signature of a launch, as a list of pairs.

    Arguments:
        request (django.http.HttpRequest): the launch request

    The launch parameters are sent in the form body, but the query string and
    an OAuth Authorization header are part of the signature too.
    """
    params = []
    for key, values in request.GET.lists():
        params.extend((key, value) for value in values)
    for key, values in request.POST.lists():
        params.extend((key, value) for value in values)

    authorization = request.headers.get('Authorization')
    if authorization and authorization.startswith('OAuth '):
        params.extend(
            oauth1.rfc5849.signature.collect_parameters(
                headers={'Authorization': authorization},
                exclude_oauth_signature=False,
            )
        )
    return params


def verify_launch_signature(request, consumer_secret):
    """
    Verify the HMAC-SHA1 signature of an LTI 1.1 launch.

    Arguments:
        request (django.http.HttpRequest): the launch request
        consumer_secret (str): secret shared with the tool consumer

    Raises:
        Lti1p1Error if the signature, timestamp or nonce is not acceptable.
    """
    params = get_launch_oauth_params(request)
    oauth_params = dict(params)

    signature_method = oauth_params.get('oauth_signature_method')
    if signature_method != oauth1.SIGNATURE_HMAC_SHA1:
        raise Lti1p1Error(f"Unsupported OAuth signature method: {signature_method}")

    signature = oauth_params.get('oauth_signature')
    if not signature:
        raise Lti1p1Error("OAuth signature is missing.")

    try:
        timestamp = int(oauth_params.get('oauth_timestamp', ''))
    except ValueError as err:
        raise Lti1p1Error("OAuth timestamp is missing or invalid.") from err
    if abs(time.time() - timestamp) > OAUTH_TIMESTAMP_TOLERANCE:
        log.info("OAuth timestamp %s out of the accepted window", timestamp)
        raise Lti1p1Error("OAuth timestamp has expired.")

    nonce = oauth_params.get('oauth_nonce')
    if not nonce:
        raise Lti1p1Error("OAuth nonce is missing.")

    signed_request = SignedRequest(
        uri=str(urllib.parse.unquote(request.build_absolute_uri())),
        http_method=str(request.method),
        params=[(key, value) for key, value in params if key != 'oauth_signature'],
        signature=signature,
    )
    if not oauth1.rfc5849.signature.verify_hmac_sha1(signed_request, consumer_secret):
        log.error(
            "OAuth signature verification failed, for "
            "consumer:%s url:%s method:%s",
            oauth_params.get('oauth_consumer_key'),
            signed_request.uri,
            signed_request.http_method,
        )
        raise Lti1p1Error("OAuth signature verification has failed.")

    nonce_key = get_nonce_cache_key(oauth_params.get('oauth_consumer_key'), nonce)
    if get_data_from_cache(nonce_key):
        raise Lti1p1Error("OAuth nonce has already been used.")
    set_data_in_cache(nonce_key, True, OAUTH_TIMESTAMP_TOLERANCE * 2)

    return True
