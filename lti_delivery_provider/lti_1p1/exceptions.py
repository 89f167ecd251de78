"""
Exceptions for LTI 1.1 launches.
"""


class Lti1p1Error(Exception):
    """
    General error class for LTI 1.1 launch verification.
    """
