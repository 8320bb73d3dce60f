"""Exception types shared across components."""


class AssistantError(Exception):
    """Base class for errors raised by assistant components."""


class ValidationError(AssistantError):
    """Operation parameters are missing or malformed.

    Carries the corrective text shown to the user.
    """

    def __init__(self, user_message: str):
        super().__init__(user_message)
        self.user_message = user_message


class DataStoreError(AssistantError):
    """Storage adapter failed to complete a query."""


class ClassifierError(AssistantError):
    """Classifier backend could not be reached."""


class ChannelError(AssistantError):
    """Message channel rejected or failed a request."""
