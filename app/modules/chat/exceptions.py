"""Errors raised by the chat pipeline. All of them end up as 500 responses at the request boundary."""


class ChatServiceError(Exception):
    """Base class for chat pipeline failures."""


class ChatThreadNotFound(ChatServiceError):
    def __init__(self, thread_id: str):
        super().__init__(f"Chat thread not found: {thread_id}")
        self.thread_id = thread_id


class EmptyUserMessage(ChatServiceError):
    def __init__(self):
        super().__init__("No user message found in request")


class WebSearchError(ChatServiceError):
    """Raised when the web search API call fails."""
