"""Runtime configuration."""

from dataclasses import dataclass


@dataclass
class WatchConfig:
    """Configuration for a watch session."""

    # Quiescence window that coalesces file notifications into one batch
    debounce_ms: int = 200

    # Grace period after starting the test validator, it has no readiness signal
    validator_wait: float = 2.0
    start_validator: bool = True

    # Seconds to wait for child processes after SIGTERM before killing them
    process_timeout: float = 5.0
