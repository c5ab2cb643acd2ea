"""Identity assignment and duplicate filtering for feed entries."""

from feed_aggregator.core.entities import Item

GUID_SEPARATOR = "-"


def assign_guid(entry_id: str, link: str, source_title: str, entry_title: str) -> str:
    """Return a stable identity for a feed entry.

    Uses the feed-supplied id, then the entry link, then the source title and
    entry title joined by ``GUID_SEPARATOR``. The last fallback is lossy: two
    entries with the same titles and no link end up with the same identity.
    """
    if entry_id:
        return entry_id
    if link:
        return link
    return f"{source_title}{GUID_SEPARATOR}{entry_title}"


def filter_duplicates(items: list[Item]) -> tuple[list[Item], int]:
    """Drop items whose guid was already seen, keeping the first occurrence.

    Returns:
        Tuple of (unique_items, duplicate_count)
    """
    seen: set[str] = set()
    unique = []
    duplicate_count = 0

    for item in items:
        if item.guid in seen:
            duplicate_count += 1
        else:
            seen.add(item.guid)
            unique.append(item)

    return unique, duplicate_count
