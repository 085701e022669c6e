import httpx
from pydantic import ValidationError
from shared.database import RestStore, eq
from shared.errors import UpstreamError
from functions.analytics_engine.config import HISTORY_COLUMNS, HISTORY_LIMIT, TRANSACTIONS_TABLE
from functions.analytics_engine.models.schemas import HistoricalTx
import structlog

logger = structlog.get_logger()


async def load_history(store: RestStore, blockchain: str | None = None, limit: int | None = None) -> list[HistoricalTx]:
    """Most recent whale transactions, newest first. A failed load yields []."""
    filters = []
    if blockchain and blockchain != "all":
        filters.append(("blockchain", eq(blockchain)))

    try:
        rows = await store.select(
            TRANSACTIONS_TABLE,
            filters,
            columns=HISTORY_COLUMNS,
            order="created_at.desc",
            limit=limit or HISTORY_LIMIT,
        )
    except (UpstreamError, httpx.HTTPError) as e:
        logger.warning("history_load_failed", blockchain=blockchain, error=str(e))
        return []

    history = []
    for row in rows:
        try:
            history.append(HistoricalTx.model_validate(row))
        except ValidationError:
            logger.debug("history_row_skipped", row_id=row.get("id"))
    return history
