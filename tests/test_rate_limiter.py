from services.rate_limiter import DAY_SECONDS, RateLimiter


def _limiter(clock):
    return RateLimiter(minute_limit=2, daily_limit=30, clock=clock)


def test_burst_limit_blocks_third_request(clock):
    limiter = _limiter(clock)
    assert limiter.check("1.2.3.4").allowed
    assert limiter.check("1.2.3.4").allowed

    decision = limiter.check("1.2.3.4")
    assert not decision.allowed
    assert 1 <= decision.retry_after_seconds <= 60
    assert decision.message.startswith("Too many requests.")


def test_minute_window_resets_lazily(clock):
    limiter = _limiter(clock)
    limiter.check("a")
    limiter.check("a")
    assert not limiter.check("a").allowed

    clock.advance(61)
    decision = limiter.check("a")
    assert decision.allowed
    # The rejected request did not consume quota.
    assert decision.remaining.minute == 1
    assert decision.remaining.daily == 27


def test_daily_limit_reports_remaining_day(clock):
    limiter = _limiter(clock)
    start = clock.now
    for _ in range(15):
        assert limiter.check("a").allowed
        assert limiter.check("a").allowed
        clock.advance(61)

    decision = limiter.check("a")
    assert not decision.allowed
    assert decision.message.startswith("Daily limit reached (30 analyses per day).")
    expected = start + DAY_SECONDS - clock.now
    assert abs(decision.retry_after_seconds - expected) <= 1


def test_daily_limit_takes_precedence_over_minute(clock):
    limiter = RateLimiter(minute_limit=2, daily_limit=1, clock=clock)
    assert limiter.check("a").allowed
    decision = limiter.check("a")
    assert not decision.allowed
    assert "Daily limit" in decision.message


def test_daily_window_resets(clock):
    limiter = RateLimiter(minute_limit=5, daily_limit=1, clock=clock)
    assert limiter.check("a").allowed
    assert not limiter.check("a").allowed

    clock.advance(DAY_SECONDS + 1)
    assert limiter.check("a").allowed


def test_clients_are_independent(clock):
    limiter = _limiter(clock)
    limiter.check("a")
    limiter.check("a")
    assert not limiter.check("a").allowed
    assert limiter.check("b").allowed


def test_cleanup_drops_only_idle_entries(clock):
    limiter = _limiter(clock)
    limiter.check("old")
    clock.advance(DAY_SECONDS + 10)
    limiter.check("fresh")

    assert limiter.cleanup_expired() == 0
    clock.advance(DAY_SECONDS)
    assert limiter.cleanup_expired() == 1
    assert len(limiter) == 1
