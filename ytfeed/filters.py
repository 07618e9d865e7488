"""Contains the filter applied to a feed before it is shown."""

__all__ = ["filter_entries"]

from collections.abc import Iterable

from ytfeed.models.video import VideoEntry


def filter_entries(
    entries: Iterable[VideoEntry],
    min_duration_seconds: int = 0,
    query: str = "",
) -> list[VideoEntry]:
    """Filter videos by length and by text, keeping their order.

    :param entries: The videos to filter.
    :param min_duration_seconds: Videos shorter than this are dropped. Videos of
        unknown length are always kept. 0 disables the filter.
    :param query: Only keep videos whose title, description or channel name contains
        this text, ignoring case. Whitespace around the query is trimmed first, so a
        blank query keeps every video.
    :return: The videos that passed both filters.
    """
    needle = query.strip().casefold()

    def matches(entry: VideoEntry) -> bool:
        if (
            min_duration_seconds > 0
            and entry.duration_seconds is not None
            and entry.duration_seconds < min_duration_seconds
        ):
            return False

        if not needle:
            return True

        return any(
            needle in text.casefold()
            for text in (entry.title, entry.description, entry.channel_name)
        )

    return [entry for entry in entries if matches(entry)]
