"""
LTI 1.3 - Platform key handling

This handles validating the id_token messages sent by a platform
when it launches the delivery tool.
"""
import json
import logging

import jwt
from edx_django_utils.monitoring import function_trace
from jwt.api_jwk import PyJWK

from . import exceptions

log = logging.getLogger(__name__)


class PlatformKeyHandler:
    """
    LTI 1.3 Platform Jwt Handler.

    Uses a platform public key or keyset URL to retrieve
    a key and validate a launch message signed by the platform.
    """
    @function_trace('lti_delivery_provider.key_handlers.PlatformKeyHandler.__init__')
    def __init__(self, public_key=None, keyset_url=None):
        """
        Instance message validator

        Import a public key from the platform by either using a keyset url
        or a public key.

        Keyset URL takes precedence because it makes key rotation easier to do.
        """
        # Only store keyset URL to avoid blocking the class
        # instancing on an external url, which is only used
        # when validating a token.
        self.keyset_url = keyset_url
        self.public_key = None

        if public_key:
            try:
                algo_obj = jwt.get_algorithm_by_name('RS256')
                public_key = algo_obj.prepare_key(public_key)
                public_jwk = json.loads(algo_obj.to_jwk(public_key))
                self.public_key = PyJWK.from_dict(public_jwk)
            except jwt.exceptions.InvalidKeyError as err:
                log.warning(
                    'An error was encountered while loading the LTI platform\'s key from the public key. '
                    'The RSA key could not parsed.'
                )
                raise exceptions.InvalidRsaKey() from err

    def _get_keyset(self):
        """
        Get keyset from available sources.
        """
        keyset = []

        if self.keyset_url:
            try:
                keys = jwt.PyJWKClient(self.keyset_url).get_jwk_set()
            except jwt.exceptions.PyJWTError as err:
                log.warning(
                    'An error was encountered while importing the LTI platform\'s keys from a JWKS URL. '
                    'The RSA keys could not be loaded.'
                )
                raise exceptions.NoSuitableKeys() from err
            keyset.extend(keys.keys)

        if self.public_key:
            keyset.append(self.public_key)

        return keyset

    def validate_and_decode(self, token, iss=None, aud=None):
        """
        Check if a launch message sent by the platform is valid.

        From http://www.imsglobal.org/spec/security/v1p0/#authentication-response-validation:

        The Tool MUST validate the signature of the ID Token, the iss and aud claims
        and that the current time is before the exp claim.
        """
        key_set = self._get_keyset()
        if not key_set:
            raise exceptions.NoSuitableKeys()

        for i, obj in enumerate(key_set):
            try:
                return jwt.decode(
                    token,
                    obj.key,
                    audience=aud,
                    issuer=iss,
                    algorithms=['RS256', 'RS512'],
                    options={
                        'verify_signature': True,
                        'verify_exp': True,
                        'verify_iss': bool(iss),
                        'verify_aud': bool(aud),
                    }
                )
            except jwt.exceptions.ExpiredSignatureError as err:
                raise exceptions.TokenSignatureExpired() from err
            except jwt.exceptions.DecodeError as err:
                if isinstance(err, jwt.exceptions.InvalidSignatureError):
                    if i == len(key_set) - 1:
                        raise exceptions.BadJwtSignature() from err
                    continue
                raise exceptions.MalformedJwtToken() from err
            except (jwt.exceptions.InvalidIssuerError, jwt.exceptions.InvalidAudienceError) as err:
                raise exceptions.InvalidClaimValue(str(err)) from err
            except jwt.exceptions.InvalidTokenError as err:
                raise exceptions.MalformedJwtToken(str(err)) from err

        raise exceptions.NoSuitableKeys()
