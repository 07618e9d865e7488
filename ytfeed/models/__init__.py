"""Contains the dataclasses used by the FeedTracker."""

__all__ = ["Defaults", "FeedConfig", "ProfileDefaults"]

from dataclasses import asdict, dataclass, field
from typing import Any, Self

from ytfeed.enums import Theme

LOOKBACK_DAYS_RANGE = range(1, 31)
REFRESH_INTERVAL_HOURS_RANGE = range(1, 49)
MAX_RESULTS_PER_CHANNEL_RANGE = range(1, 201)


@dataclass
class FeedConfig:
    """Represents the preferences of the FeedTracker."""

    lookback_days: int = 5
    """How many days back to look for new videos"""

    refresh_interval_hours: int = 1
    """How many hours a feed stays fresh before it is fetched again"""

    max_results_per_channel: int = 20
    """The maximum number of recent uploads to read per channel"""

    min_duration_seconds: int = 90
    """Videos shorter than this are hidden from the feed. 0 disables the filter"""

    theme: Theme = Theme.DARK
    """The color theme of the feed"""

    diagnostics_enabled: bool = True
    """Whether to log debug messages"""

    def __post_init__(self) -> None:
        """Validate the preferences.

        :raises ValueError: If a value is out of range.
        """
        if isinstance(self.theme, str):
            self.theme = Theme(self.theme)

        checks = (
            ("lookback_days", self.lookback_days, LOOKBACK_DAYS_RANGE),
            (
                "refresh_interval_hours",
                self.refresh_interval_hours,
                REFRESH_INTERVAL_HOURS_RANGE,
            ),
            (
                "max_results_per_channel",
                self.max_results_per_channel,
                MAX_RESULTS_PER_CHANNEL_RANGE,
            ),
        )
        for name, value, valid in checks:
            if value not in valid:
                raise ValueError(
                    f"{name} must be between {valid.start} and {valid.stop - 1}, "
                    f"got {value}"
                )

        if self.min_duration_seconds < 0:
            raise ValueError(
                f"min_duration_seconds cannot be negative, "
                f"got {self.min_duration_seconds}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert the preferences into a JSON-serializable dict."""
        data = asdict(self)
        data["theme"] = self.theme.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create preferences from a dict made by :meth:`to_dict`.
        Unknown keys are ignored and missing keys take their default values.

        :raises ValueError: If a value is out of range.
        """
        known = {
            key: value
            for key, value in data.items()
            if key in cls.__dataclass_fields__
        }
        return cls(**known)


@dataclass
class ProfileDefaults:
    """Represents a profile that is created on the first run."""

    name: str
    """The name of the profile"""

    channels: list[str] = field(default_factory=list)
    """The channel IDs or names to track in the profile"""


@dataclass
class Defaults:
    """Represents the defaults applied on the first run."""

    channels: list[str] = field(default_factory=list)
    """The channel IDs or names to track in the first profile"""

    profiles: list[ProfileDefaults] = field(default_factory=list)
    """Additional profiles to create"""

    config: FeedConfig = field(default_factory=FeedConfig)
    """The initial preferences"""
