"""Core application configuration & tunable exchange rules.

All business rules that may evolve (serving windows, refresh cadences, settlement
retry policy, suspension lengths, credit packages, request throttling) are
centralized here so they can be adjusted without diving into service logic.
Values are module constants read from the environment with sane defaults
(mutable dicts allowed so tests can monkeypatch values).
"""
from __future__ import annotations

import os


def _env_bool(name: str, default: bool = False) -> bool:
	raw = os.getenv(name)
	if raw is None or not raw.strip():
		return default
	return raw.strip().lower() in {"1", "true", "yes", "on"}


# ------------------------------- Ad Serving ------------------------------- #
AD_SERVING: dict[str, int] = {
	# Max records fetched per waterfall pool before the self-exclusion filter.
	"candidate_window": int(os.getenv("AD_CANDIDATE_WINDOW", "20")),
	# Refresh cadence when the publisher has not configured one.
	"default_refresh_seconds": 30,
	# Publisher opted out of showing ads; widget should stop polling.
	"disabled_refresh_seconds": 3600,
	# Safe default returned when selection fails unexpectedly.
	"error_refresh_seconds": 60,
	# Bounds accepted for a publisher-configured refresh interval.
	"min_refresh_seconds": 5,
	"max_refresh_seconds": 3600,
}

# Fixed, creditless fallback advertiser. Never stored as a Website row.
SYSTEM_PROMOTION: dict[str, str] = {
	"id": "RUNADS_OFFICIAL",
	"domain": "runads.com",
	"category": "Technology",
	"description": "Grow your traffic for free. Join the RunAds exchange network.",
	"url": os.getenv("SYSTEM_PROMOTION_URL", "https://runads.com"),
}

# Publisher id used by the marketing-site demo widget.
DEMO_PUBLISHER_ID: str = "DEMO"

# ------------------------------- Settlement ------------------------------- #
SETTLEMENT: dict[str, int | float | bool] = {
	"credits_per_click": 1,
	# Attempts for a settlement transaction that hits a transient store error.
	"max_attempts": 3,
	# Beta/testing override: allow an owner to settle clicks between own sites.
	"allow_self_clicks": _env_bool("ALLOW_SELF_CLICKS", False),
}

# --------------------------------- Backoff -------------------------------- #
# Delay between retried settlement transactions (seconds, small on purpose:
# the click redirect waits on it).
BACKOFF_POLICY: dict[str, int | float] = {
	"base_seconds": 0.05,
	"factor": 2,
	"max_seconds": 1,
	"jitter_pct": 0.10,
}

# --------------------------- Registration Guard --------------------------- #
REGISTRATION_GUARD: dict[str, int | str] = {
	"suspension_hours": 24,
	# Offense count at which the account is permanently banned.
	"permanent_ban_offenses": 2,
	"suspension_reason": "Duplicate domain submission (1st Offense)",
	"permanent_ban_reason": "Duplicate domain submission (Repeat Offense)",
}

# ------------------------------- Accounts --------------------------------- #
ACCOUNT_DEFAULTS: dict[str, int] = {
	"starting_credits": int(os.getenv("STARTING_CREDITS", "50")),
}

# ------------------------------- Payments --------------------------------- #
CREDIT_PACKAGES: dict[str, dict[str, str | int]] = {
	"starter": {"name": "Starter Pack", "price": "1.00", "credits": 100},
	"pro": {"name": "Pro Pack", "price": "5.00", "credits": 600},
	"business": {"name": "Business Pack", "price": "20.00", "credits": 3000},
}

PAYMENT_WEBHOOK_SECRET: str | None = os.getenv("PAYMENT_WEBHOOK_SECRET") or None

# ---------------------------- Request Throttling --------------------------- #
RATE_LIMIT_SETTINGS: dict[str, dict[str, int]] = {
	"ads": {"limit": 600, "window_seconds": 60},
	"click": {"limit": 60, "window_seconds": 60},
	"default": {"limit": 1000, "window_seconds": 3600},
}

# --------------------------------- Logging -------------------------------- #
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE: str | None = os.getenv("LOG_FILE", "logs/adexchange.log") or None

__all__ = [
	"AD_SERVING",
	"SYSTEM_PROMOTION",
	"DEMO_PUBLISHER_ID",
	"SETTLEMENT",
	"BACKOFF_POLICY",
	"REGISTRATION_GUARD",
	"ACCOUNT_DEFAULTS",
	"CREDIT_PACKAGES",
	"PAYMENT_WEBHOOK_SECRET",
	"RATE_LIMIT_SETTINGS",
	"LOG_LEVEL",
	"LOG_FILE",
]
