"""
Test utils
"""
import time
import uuid

import jwt
from Cryptodome.PublicKey import RSA

from lti_delivery_provider.constants import LtiRoles
from lti_delivery_provider.lti_1p3 import constants

ISSUER = 'https://platform.example.com'
CLIENT_ID = 'client-id'
DEPLOYMENT_ID = 'deployment-1'
RESOURCE_LINK_ID = 'resource-link-1p3'
RETURN_URL = 'https://platform.example.com/return'


def generate_rsa_key():
    """
    Return a new RSA key and its public key in PEM format.
    """
    key = RSA.generate(2048)
    return key, key.publickey().export_key('PEM').decode('utf-8')


def create_jwt(key, message):
    """
    Uses private key to create a JWS from a dict.
    """
    token = jwt.encode(
        message, key.export_key('PEM'), algorithm='RS256'
    )
    return token


def make_launch_message(**overrides):
    """
    Build the payload of a learner resource link launch.
    """
    now = int(time.time())
    message = {
        'iss': ISSUER,
        'aud': CLIENT_ID,
        'sub': 'learner-1p3',
        'nonce': uuid.uuid4().hex,
        'iat': now,
        'exp': now + 3600,
        constants.CLAIM_MESSAGE_TYPE: constants.LTI_1P3_RESOURCE_LINK_REQUEST,
        constants.CLAIM_VERSION: constants.LTI_1P3_VERSION,
        constants.CLAIM_DEPLOYMENT_ID: DEPLOYMENT_ID,
        constants.CLAIM_RESOURCE_LINK: {'id': RESOURCE_LINK_ID},
        constants.CLAIM_ROLES: [LtiRoles.CONTEXT_LTI1P3_LEARNER],
        constants.CLAIM_LAUNCH_PRESENTATION: {'return_url': RETURN_URL, 'locale': 'en'},
    }
    message.update(overrides)
    return message
