class ReaderError(Exception):
    pass


class ReaderActionError(ReaderError):
    """A reader control could not be operated (missing, hidden, or timed out)."""
    pass


class SessionError(ReaderError):
    """No usable reader session could be established (browser launch or sign-in)."""
    pass
