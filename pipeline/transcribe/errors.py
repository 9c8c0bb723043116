class TranscriptionError(Exception):
    """Fatal for the current page; the book run moves on to the next page."""

    def __init__(self, message: str, image_path: str = None):
        super().__init__(message)
        self.image_path = image_path


class RefusalLimitError(TranscriptionError):
    pass


class SnapshotNameError(TranscriptionError):
    pass
