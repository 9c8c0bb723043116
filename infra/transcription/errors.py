class TranscriptionProviderError(Exception):
    """The transcription backend failed to return a usable response."""

    def __init__(self, message: str, provider: str = None, retryable: bool = False):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


class MalformedResponseError(TranscriptionProviderError):
    pass
