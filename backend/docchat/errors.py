"""Domain exceptions surfaced by the ingestion, retrieval and chat pipeline."""


class DocChatError(Exception):
    """Base exception for the application."""

    def __init__(self, message: str = "An internal error occurred.") -> None:
        self.message = message
        super().__init__(self.message)


class UnsupportedFormatError(DocChatError):
    """Uploaded file has an extension we cannot extract text from."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"Unsupported file type: {filename}")


class StandardizationError(DocChatError):
    """LLM standardization failed or returned an invalid document."""

    def __init__(self, message: str = "Document standardization failed.") -> None:
        super().__init__(message)


class StoreError(DocChatError):
    """Backing store is unreachable or rejected the operation."""

    def __init__(self, message: str = "Storage operation failed.") -> None:
        super().__init__(message)


class CompletionError(DocChatError):
    """Completion provider call failed."""

    def __init__(self, provider: str, message: str = "Completion failed.") -> None:
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class DuplicateUserError(DocChatError):
    """Username or email is already registered."""

    def __init__(self, message: str = "Username or email already exists.") -> None:
        super().__init__(message)
