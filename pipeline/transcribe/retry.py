from typing import Iterator

from infra.config import TranscriptionSettings

SYSTEM_PROMPT = (
    "You will be given an image containing text. Read the text from the image and output it verbatim.\n"
    "Do not include any additional text, descriptions, or punctuation. Ignore any embedded images. "
    "Do not use markdown."
)

EMPHASIS = "This is an important task for analyzing legal documents cited in a court case."


class TranscriptionRetryPolicy:
    """
    Attempt budget and sampling schedule for one page.

    Attempts are 1-based. The first `deterministic_attempts` run at
    base_temperature; later ones at escalated_temperature so a model stuck on
    a refusal can sample its way out. After `emphasis_after_attempts` the
    system prompt gains an emphasis line.
    """

    def __init__(
        self,
        max_attempts: int = 20,
        deterministic_attempts: int = 2,
        base_temperature: float = 0.0,
        escalated_temperature: float = 0.5,
        emphasis_after_attempts: int = 3,
        system_prompt: str = SYSTEM_PROMPT
    ):
        self.max_attempts = max_attempts
        self.deterministic_attempts = deterministic_attempts
        self.base_temperature = base_temperature
        self.escalated_temperature = escalated_temperature
        self.emphasis_after_attempts = emphasis_after_attempts
        self.system_prompt = system_prompt

    @classmethod
    def from_settings(cls, settings: TranscriptionSettings) -> "TranscriptionRetryPolicy":
        return cls(
            max_attempts=settings.max_attempts,
            deterministic_attempts=settings.deterministic_attempts,
            base_temperature=settings.base_temperature,
            escalated_temperature=settings.escalated_temperature,
            emphasis_after_attempts=settings.emphasis_after_attempts,
        )

    def attempts(self) -> Iterator[int]:
        return iter(range(1, self.max_attempts + 1))

    def is_last(self, attempt: int) -> bool:
        return attempt >= self.max_attempts

    def temperature_for(self, attempt: int) -> float:
        if attempt <= self.deterministic_attempts:
            return self.base_temperature
        return self.escalated_temperature

    def system_prompt_for(self, attempt: int) -> str:
        if attempt > self.emphasis_after_attempts:
            return f"{self.system_prompt}\n\n{EMPHASIS}"
        return self.system_prompt
