"""Error taxonomy shared by the services and the HTTP layer."""


class ExamBuddyError(Exception):
    """Base class for application errors."""


class ModelCallError(ExamBuddyError):
    """The Gemini call itself failed (transport, quota, missing key)."""


class ResponseParseError(ExamBuddyError):
    """The model answered, but not in the shape we asked for."""


class SessionStateError(ExamBuddyError):
    """An operation was attempted in a state that does not allow it."""


class SessionBusyError(SessionStateError):
    """Another model call for the same session is still in flight."""


class SessionStartError(ExamBuddyError):
    pass


class AnswerSubmitError(ExamBuddyError):
    pass


class SummaryError(ExamBuddyError):
    pass


class TopicFetchError(ExamBuddyError):
    pass


class FlashcardGenerationError(ExamBuddyError):
    pass


class ProfileParseError(ExamBuddyError):
    """The persisted profile record exists but cannot be read back."""


class StreamError(ExamBuddyError):
    """The chat stream broke off before completion."""
