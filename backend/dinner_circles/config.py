"""
Matching configuration.

Circle sizes are read from the environment (.env supported):
- CIRCLE_TARGET_SIZE: members per full circle (default 6)
- CIRCLE_MIN_SIZE: floor for the single overflow circle (default 4)
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TARGET_SIZE = 6
DEFAULT_MIN_SIZE = 4


@dataclass(frozen=True)
class MatchingConfig:
    target_size: int = DEFAULT_TARGET_SIZE
    min_size: int = DEFAULT_MIN_SIZE

    def __post_init__(self):
        if self.target_size < 1:
            raise ValueError(f"target_size must be >= 1, got {self.target_size}")
        if not 1 <= self.min_size <= self.target_size:
            raise ValueError(f"min_size must be between 1 and target_size ({self.target_size}), got {self.min_size}")


def load_matching_config() -> MatchingConfig:
    """Build a MatchingConfig from CIRCLE_TARGET_SIZE / CIRCLE_MIN_SIZE."""
    return MatchingConfig(
        target_size=int(os.getenv("CIRCLE_TARGET_SIZE", str(DEFAULT_TARGET_SIZE))),
        min_size=int(os.getenv("CIRCLE_MIN_SIZE", str(DEFAULT_MIN_SIZE))),
    )
