# app/services/health.py

from datetime import datetime, timezone

from app.core.config import Settings
from app.services.history_store import HistoryStore


async def collect_health(settings: Settings, history: HistoryStore) -> dict:
    """Descriptive status only; nothing in the engine reads this."""
    return {
        "backend": "healthy",
        "database": await history.status(),
        "llm": settings.configured_provider(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
