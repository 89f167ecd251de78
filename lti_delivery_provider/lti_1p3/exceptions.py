"""
Custom exceptions for LTI 1.3 launches
"""


class Lti1p3Exception(Exception):
    """
    This is the base exception for LTI 1.3 related exceptions. LTI 1.3 exceptions should extend this class to provide
    greater detail about the exception.
    """
    message = None

    def __init__(self, message=None):
        if not message:
            message = self.message
        super().__init__(message)


class TokenSignatureExpired(Lti1p3Exception):
    message = "The token signature has expired."


class NoSuitableKeys(Lti1p3Exception):
    message = "JWKS could not be loaded from the URL."


class BadJwtSignature(Lti1p3Exception):
    message = "The JWT signature is invalid."


class UnknownClientId(Lti1p3Exception):
    message = "The platform and client id pair is not registered."


class MalformedJwtToken(Lti1p3Exception):
    message = "The JWT could not be parsed because it is malformed."


class MissingRequiredClaim(Lti1p3Exception):
    message = "The required claim is missing."


class InvalidClaimValue(Lti1p3Exception):
    message = "The claim has an invalid value."


class InvalidRsaKey(Lti1p3Exception):
    message = "The RSA key could not parsed."


class ReplayedNonce(Lti1p3Exception):
    message = "The nonce has already been used."
