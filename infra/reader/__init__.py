from .errors import ReaderError, ReaderActionError, SessionError
from .surface import ReaderSurface, TocRow, ResponseHandler, reader_url

__all__ = [
    'ReaderError',
    'ReaderActionError',
    'SessionError',
    'ReaderSurface',
    'TocRow',
    'ResponseHandler',
    'reader_url',
]
