"""Admin dashboard summary."""

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta

from backend.docchat.db.models import as_utc
from backend.docchat.db.repositories import Stores
from backend.docchat.models.summary import DashboardSummary, RecentItem, Trends

TREND_DAYS = 7
RECENT_LIMIT = 5


def _per_day(timestamps: Iterable[datetime], days: list[date]) -> list[int]:
    counts = Counter(as_utc(ts).date() for ts in timestamps)
    return [counts.get(day, 0) for day in days]


async def build_summary(stores: Stores, today: date | None = None) -> DashboardSummary:
    """Counts, recent items and seven-day trends.

    Args:
        stores: Store bundle
        today: Last day of the trend window (defaults to the current UTC date)

    Returns:
        DashboardSummary with trends ordered oldest day first
    """
    today = today or datetime.now(UTC).date()
    days = [today - timedelta(days=offset) for offset in range(TREND_DAYS - 1, -1, -1)]
    since = datetime.combine(days[0], time.min, tzinfo=UTC)

    recent_docs = await stores.documents.list_recent(RECENT_LIMIT)
    recent_chats = await stores.chats.list_recent_chats(RECENT_LIMIT)
    upload_times = await stores.documents.created_since(since)
    query_times = await stores.chats.user_message_times_since(since)

    return DashboardSummary(
        documents=await stores.documents.count(),
        active_chats=await stores.chats.count_chats(),
        recent_docs=[
            RecentItem(id=doc.id, name=doc.title, date=doc.created_at) for doc in recent_docs
        ],
        recent_chats=[
            RecentItem(id=chat.id, name=chat.title or "Untitled chat", date=chat.updated_at)
            for chat in recent_chats
        ],
        trends=Trends(
            days=[day.isoformat() for day in days],
            uploads_per_day=_per_day(upload_times, days),
            queries_per_day=_per_day(query_times, days),
        ),
    )
