import asyncio

from adexchange.utils.ratelimiter import InMemoryRateLimiter


def _limiter_at(clock):
    limiter = InMemoryRateLimiter()
    limiter._now = lambda: clock["now"]
    return limiter


def test_expired_visitor_windows_are_dropped():
    clock = {"now": 1_000_000}
    limiter = _limiter_at(clock)

    async def scenario():
        for i in range(5000):
            allowed, _ = await limiter.check_and_increment(f"visitor:10.0.{i // 256}.{i % 256}", "ads", 10, 1)
            assert allowed
        assert len(limiter._windows) == 5000

        clock["now"] += 2
        await limiter.check_and_increment("visitor:10.9.9.9", "ads", 10, 1)

    asyncio.run(scenario())
    assert list(limiter._windows) == [("visitor:10.9.9.9", "ads")]


def test_live_windows_survive_a_sweep():
    clock = {"now": 1_000_000}
    limiter = _limiter_at(clock)

    async def scenario():
        # Long-window bucket opened first; short-window traffic later triggers sweeps
        for _ in range(3):
            await limiter.check_and_increment("key:rk_a", "default", 5, 3600)
        clock["now"] += 120
        await limiter.check_and_increment("visitor:10.0.0.1", "click", 5, 60)
        return await limiter.check_and_increment("key:rk_a", "default", 5, 3600)

    allowed, meta = asyncio.run(scenario())
    assert allowed
    assert meta["count"] == 4
    assert ("key:rk_a", "default") in limiter._windows
