"""
Tests for pipeline/transcribe/retry.py
"""

from infra.config import TranscriptionSettings
from pipeline.transcribe.retry import EMPHASIS, SYSTEM_PROMPT, TranscriptionRetryPolicy


class TestRetrySchedule:

    def test_twenty_attempts_numbered_from_one(self):
        policy = TranscriptionRetryPolicy()

        attempts = list(policy.attempts())

        assert attempts[0] == 1
        assert attempts[-1] == 20
        assert len(attempts) == 20
        assert policy.is_last(20)
        assert not policy.is_last(19)

    def test_temperature_escalates_from_third_attempt(self):
        policy = TranscriptionRetryPolicy()

        assert [policy.temperature_for(a) for a in (1, 2, 3, 4, 20)] == [0.0, 0.0, 0.5, 0.5, 0.5]

    def test_emphasis_added_after_third_attempt(self):
        policy = TranscriptionRetryPolicy()

        assert policy.system_prompt_for(1) == SYSTEM_PROMPT
        assert policy.system_prompt_for(3) == SYSTEM_PROMPT
        assert policy.system_prompt_for(4).startswith(SYSTEM_PROMPT)
        assert policy.system_prompt_for(4).endswith(EMPHASIS)

    def test_from_settings(self):
        settings = TranscriptionSettings(
            max_attempts=5,
            deterministic_attempts=1,
            escalated_temperature=0.8,
            emphasis_after_attempts=0,
        )

        policy = TranscriptionRetryPolicy.from_settings(settings)

        assert len(list(policy.attempts())) == 5
        assert policy.temperature_for(1) == 0.0
        assert policy.temperature_for(2) == 0.8
        assert EMPHASIS in policy.system_prompt_for(1)
