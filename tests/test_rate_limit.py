"""
Unit Tests for Rate Limiting
============================
"""

from sink.core.rate_limit import RateLimitSettings


class TestRateLimitSettings:
    """Tests for the periodic trigger."""

    def test_defaults(self):
        settings = RateLimitSettings()

        assert settings.timeout_ms == 0
        assert settings.every_n == 0
        assert settings.counter == 0

    def test_every_third_call(self):
        settings = RateLimitSettings(timeout_ms=100, every_n=3)

        results = [settings.is_triggered() for _ in range(7)]

        assert results == [False, False, True, False, False, True, False]
        assert settings.counter == 7

    def test_every_call(self):
        settings = RateLimitSettings(every_n=1)
        assert all(settings.is_triggered() for _ in range(5))

    def test_disabled(self):
        settings = RateLimitSettings(timeout_ms=100, every_n=0)

        assert not any(settings.is_triggered() for _ in range(10))
        assert settings.counter == 10

    def test_counter_not_settable_at_init(self):
        settings = RateLimitSettings(0, 2)
        assert settings.counter == 0
