"""
Alert inbox operations, always scoped to the calling user.
"""
import random
from datetime import datetime, timezone
from shared.database import RestStore, eq
from functions.alert_processor.config import (
    ALERTS_TABLE, DEFAULT_PAGE_SIZE, DEFAULT_ALERT_TYPE, DEFAULT_SEVERITY,
    TEST_ALERT_COUNT, TEST_ALERT_TYPES, TEST_SEVERITIES, TEST_BLOCKCHAINS,
)
from functions.alert_processor.models.schemas import ActionResult, AlertData, AlertFilters, UnreadCount
import structlog

logger = structlog.get_logger()


class AlertInbox:
    def __init__(self, store: RestStore, user_id: str, rng: random.Random | None = None):
        self.store = store
        self.user_id = user_id
        self.rng = rng or random.Random()

    def _owned(self, *extra: tuple[str, str]) -> list[tuple[str, str]]:
        return [("user_id", eq(self.user_id)), *extra]

    async def get_alerts(self, filters: AlertFilters | None) -> list[dict]:
        f = filters or AlertFilters()
        scope = self._owned()
        if f.is_read is not None:
            scope.append(("is_read", eq(f.is_read)))
        if f.type:
            scope.append(("type", eq(f.type)))
        if f.severity:
            scope.append(("severity", eq(f.severity)))

        return await self.store.select(
            ALERTS_TABLE,
            scope,
            order="created_at.desc",
            limit=f.limit or DEFAULT_PAGE_SIZE,
            error="Failed to fetch alerts",
        )

    async def mark_read(self, alert_id: str) -> list[dict]:
        return await self.store.update(
            ALERTS_TABLE,
            self._owned(("id", eq(alert_id))),
            {"is_read": True},
            error="Failed to mark alert as read",
        )

    async def mark_all_read(self) -> ActionResult:
        await self.store.update(
            ALERTS_TABLE,
            self._owned(("is_read", eq(False))),
            {"is_read": True},
            returning=False,
            error="Failed to mark all alerts as read",
        )
        return ActionResult(message="All alerts marked as read")

    async def create(self, data: AlertData) -> list[dict]:
        row = {
            "user_id": self.user_id,
            "agent_id": data.agent_id,
            "title": data.title,
            "message": data.message,
            "type": data.type or DEFAULT_ALERT_TYPE,
            "severity": data.severity or DEFAULT_SEVERITY,
            "metadata": data.metadata or {},
        }
        rows = await self.store.insert(ALERTS_TABLE, row, error="Failed to create alert")
        logger.info("alert_created", user_id=self.user_id, type=row["type"], severity=row["severity"])
        return rows

    async def delete(self, alert_id: str) -> ActionResult:
        await self.store.delete(ALERTS_TABLE, self._owned(("id", eq(alert_id))), error="Failed to delete alert")
        return ActionResult(message="Alert deleted")

    async def unread_count(self) -> UnreadCount:
        n = await self.store.count(ALERTS_TABLE, self._owned(("is_read", eq(False))), error="Failed to count alerts")
        return UnreadCount(unread_count=n)

    def _demo_alert(self, index: int, generated_at: str) -> dict:
        alert_type = self.rng.choice(TEST_ALERT_TYPES)
        return {
            "user_id": self.user_id,
            "title": f"[{alert_type.upper()}] Alert {index + 1}",
            "message": f"Demo alert generated at {generated_at}",
            "type": alert_type,
            "severity": self.rng.choice(TEST_SEVERITIES),
            "metadata": {
                "source": "test_generator",
                "blockchain": self.rng.choice(TEST_BLOCKCHAINS),
            },
        }

    async def generate_test_alerts(self) -> list[dict]:
        generated_at = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        batch = [self._demo_alert(i, generated_at) for i in range(TEST_ALERT_COUNT)]
        rows = await self.store.insert(ALERTS_TABLE, batch, error="Failed to generate test alerts")
        logger.info("test_alerts_generated", user_id=self.user_id, count=len(batch))
        return rows
