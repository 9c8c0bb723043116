class ExtractionError(Exception):
    """Fatal for the current document; the batch moves on to the next one."""

    def __init__(self, message: str, document_id: str = None):
        super().__init__(message)
        self.document_id = document_id


class SessionExpiredError(ExtractionError):
    pass


class NoContentPagesError(ExtractionError):
    pass


class MetadataTimeoutError(ExtractionError):
    pass


class TocHarvestError(ExtractionError):
    pass
