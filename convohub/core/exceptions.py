class ConversationError(Exception):
    """Base class for errors raised by the conversation engine."""

    def __init__(self, message: str = "Conversation error"):
        super().__init__(message)
        self.message = message


class InvalidArgument(ConversationError):
    """Caller input is missing or malformed."""

    def __init__(self, message: str = "Invalid argument"):
        super().__init__(message)


class NotFound(ConversationError):
    """The referenced conversation does not exist."""

    def __init__(self, message: str = "Chat Not Found"):
        super().__init__(message)


class ConflictRetry(ConversationError):
    """A concurrent insert won the unique pair index; re-read instead of failing."""

    def __init__(self, message: str = "One-to-one conversation was created concurrently"):
        super().__init__(message)


class StoreUnavailable(ConversationError):
    """The conversation store or one of its collaborators failed."""

    def __init__(self, message: str = "Conversation store unavailable"):
        super().__init__(message)
