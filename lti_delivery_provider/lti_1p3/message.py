"""
LTI 1.3 - Launch message validation

Validates the id_token a platform posts to the delivery tool and returns
its claims.
"""
import logging

import jwt

from lti_delivery_provider.models import LtiPlatformRegistration
from lti_delivery_provider.utils import (
    check_token_claim,
    get_data_from_cache,
    get_nonce_cache_key,
    set_data_in_cache,
)

from . import constants, exceptions
from .key_handlers import PlatformKeyHandler

log = logging.getLogger(__name__)


def get_unverified_claims(id_token):
    """
    Read the claims of a token without checking its signature, to find out who sent it.
    """
    try:
        return jwt.decode(id_token, options={'verify_signature': False})
    except jwt.exceptions.DecodeError as err:
        raise exceptions.MalformedJwtToken() from err


def get_platform_registration(issuer, audience):
    """
    Return the registration matching the issuer and one of the audiences of the token.
    """
    audiences = audience if isinstance(audience, list) else [audience]
    registration = LtiPlatformRegistration.objects.filter(issuer=issuer, client_id__in=audiences).first()
    if registration is None:
        raise exceptions.UnknownClientId(f"No platform registered for issuer {issuer} and client id {audience}.")
    return registration


def validate_launch_message(id_token):
    """
    Validate an LTI 1.3 resource link launch and return its claims.

    Checks the signature against the registered platform keys, the iss, aud
    and exp claims, the LTI required claims, the deployment id and that the
    nonce was not seen before.
    """
    if not id_token:
        raise exceptions.MissingRequiredClaim("The id_token is missing.")

    unverified = get_unverified_claims(id_token)
    issuer = unverified.get('iss')
    audience = unverified.get('aud')
    if not issuer or not audience:
        raise exceptions.MissingRequiredClaim("Token is missing the iss or aud claim.")

    registration = get_platform_registration(issuer, audience)
    key_handler = PlatformKeyHandler(
        public_key=registration.platform_public_key or None,
        keyset_url=registration.platform_keyset_url or None,
    )
    message = key_handler.validate_and_decode(id_token, iss=registration.issuer, aud=registration.client_id)

    for claim_key in constants.LTI_1P3_REQUIRED_CLAIMS:
        check_token_claim(message, claim_key)

    check_token_claim(
        message,
        constants.CLAIM_MESSAGE_TYPE,
        constants.LTI_1P3_RESOURCE_LINK_REQUEST,
        f"Token's {constants.CLAIM_MESSAGE_TYPE} claim should be {constants.LTI_1P3_RESOURCE_LINK_REQUEST}."
    )
    check_token_claim(
        message,
        constants.CLAIM_VERSION,
        constants.LTI_1P3_VERSION,
        f"Token's {constants.CLAIM_VERSION} claim should be {constants.LTI_1P3_VERSION}."
    )
    if registration.deployment_id:
        check_token_claim(
            message,
            constants.CLAIM_DEPLOYMENT_ID,
            registration.deployment_id,
            f"Token's {constants.CLAIM_DEPLOYMENT_ID} claim does not match the registered deployment."
        )
    if not message[constants.CLAIM_RESOURCE_LINK].get('id'):
        raise exceptions.MissingRequiredClaim(f"Token's {constants.CLAIM_RESOURCE_LINK} claim has no id.")

    nonce_key = get_nonce_cache_key(registration.issuer, message['nonce'])
    if get_data_from_cache(nonce_key):
        log.warning("Replayed LTI 1.3 launch from %s with nonce %s", registration.issuer, message['nonce'])
        raise exceptions.ReplayedNonce()
    set_data_in_cache(nonce_key, True, constants.LTI_1P3_NONCE_TTL)

    return message
