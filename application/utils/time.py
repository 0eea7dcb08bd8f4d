from datetime import UTC, datetime


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def time_ago(moment: datetime, now: datetime | None = None) -> str:
    """Human readable age of a timestamp, e.g. "5 minutes ago"."""
    now = now or datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)

    seconds = int((now - moment).total_seconds())
    if seconds < 60:
        return 'just now'
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, 'minute')
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, 'hour')
    return _plural(hours // 24, 'day')
