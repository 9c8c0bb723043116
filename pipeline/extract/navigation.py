from dataclasses import dataclass
from enum import Enum
from typing import Optional

from infra.pipeline.logger import console_logger
from infra.reader import ReaderSurface, ReaderActionError


class NavigationOutcome(str, Enum):
    ADVANCED = "advanced"
    FAILED = "failed"


@dataclass
class NavigationResult:
    outcome: NavigationOutcome
    advance_actions: int = 0
    polls: int = 0
    waits: int = 0
    fingerprint: Optional[str] = None

    @property
    def advanced(self) -> bool:
        return self.outcome == NavigationOutcome.ADVANCED


class NavigationRetryDriver:
    """
    Turns one page on a surface that sometimes ignores the next-page action.

    The page image src is the fingerprint. Each poll compares it against the
    fingerprint from before the turn; the action is re-issued every
    polls_per_reissue polls, up to max_reissues times. Hitting the ceiling (or
    losing the next-page control) is reported as FAILED, which callers treat as
    the end of navigable content.
    """

    def __init__(
        self,
        surface: ReaderSurface,
        max_reissues: int = 10,
        polls_per_reissue: int = 10,
        poll_interval_seconds: float = 0.1,
        logger=None
    ):
        self.surface = surface
        self.max_reissues = max_reissues
        self.polls_per_reissue = polls_per_reissue
        self.poll_interval_seconds = poll_interval_seconds
        self.logger = logger or console_logger("extract")

    @property
    def max_polls(self) -> int:
        return self.max_reissues * self.polls_per_reissue

    def advance(self, previous_fingerprint: Optional[str]) -> NavigationResult:
        result = NavigationResult(outcome=NavigationOutcome.FAILED)

        for poll in range(self.max_polls):
            if poll % self.polls_per_reissue == 0:
                if poll > 0:
                    self.logger.warning(
                        "Page did not turn, re-issuing next-page action",
                        retries=poll,
                        fingerprint=previous_fingerprint,
                    )
                try:
                    self.surface.advance()
                except ReaderActionError as e:
                    self.logger.warning(
                        "Unable to navigate to next page",
                        advance_actions=result.advance_actions,
                        error=str(e),
                    )
                    return result
                result.advance_actions += 1

            result.polls += 1
            fingerprint = self.surface.page_fingerprint()
            if fingerprint != previous_fingerprint:
                result.outcome = NavigationOutcome.ADVANCED
                result.fingerprint = fingerprint
                return result

            self.surface.wait(self.poll_interval_seconds)
            result.waits += 1

        self.logger.warning(
            "Page never changed, treating as end of navigable content",
            advance_actions=result.advance_actions,
            polls=result.polls,
        )
        return result
