"""
Utilities package initialization.
"""
from .logger import get_logger, log_business_event, log_performance, setup_logging
from .domains import normalize_domain, destination_url

__all__ = ["get_logger", "log_business_event", "log_performance", "setup_logging", "normalize_domain", "destination_url"]
