"""
Exceptions for the LTI delivery provider.
"""
from lti_delivery_provider.constants import LtiErrorMessage


class LtiException(Exception):
    """
    General error class for LTI launches.

    Carries an error code that is reported back to the tool consumer.
    """
    def __init__(self, message='', code=None):
        super().__init__(message)
        self.code = code

    @property
    def message(self):
        return str(self)


class LtiVariableMissingException(LtiException):
    """
    A variable expected in the launch data was not sent by the consumer.
    """
    def __init__(self, variable_name):
        super().__init__(
            f'Expected LTI variable {variable_name} missing',
            LtiErrorMessage.ERROR_INVALID_PARAMETER,
        )
        self.variable_name = variable_name


class ActionFullException(Exception):
    """
    The action queue has no free slot, the caller has been placed in the queue.
    """
    def __init__(self, position):
        super().__init__(f'Action queue is full, current position is {position}')
        self.position = position


class QtiTestExtractionFailedException(Exception):
    """
    The compiled test of a delivery could not be prepared for a new execution.
    """


class InconsistentData(Exception):
    """
    The stored links contradict each other.
    """
