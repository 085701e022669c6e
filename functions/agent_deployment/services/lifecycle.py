"""
Agent lifecycle against the `agents` table. Every write is scoped to the
calling user by `id` and `user_id` filters.
"""
import uuid
from datetime import datetime, timezone
from typing import Callable
from shared.database import RestStore, eq
from shared.errors import InvalidPayloadError, NotFoundError
from functions.agent_deployment.config import AGENTS_TABLE, DEFAULT_AGENT_TYPE, DEPLOYMENT_REGION
from functions.agent_deployment.models.schemas import AgentData, DeleteResult
import structlog

logger = structlog.get_logger()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


class AgentLifecycle:
    def __init__(self, store: RestStore, user_id: str, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.user_id = user_id
        self.clock = clock

    def _scope(self, agent_id: str) -> list[tuple[str, str]]:
        return [("id", eq(agent_id)), ("user_id", eq(self.user_id))]

    def _deployment_info(self, now: datetime) -> dict:
        return {
            "deployed_at": _iso(now),
            "instance_id": str(uuid.uuid4()),
            "region": DEPLOYMENT_REGION,
        }

    async def create(self, data: AgentData) -> list[dict]:
        now = self.clock()
        row = {
            "user_id": self.user_id,
            "name": data.name,
            "type": data.type or DEFAULT_AGENT_TYPE,
            "description": data.description,
            "status": "running",
            "configuration": data.configuration or {},
            "deployment_info": self._deployment_info(now),
            "metrics": {"transactions_scanned": 0, "alerts_generated": 0, "uptime_seconds": 0},
            "last_activity": _iso(now),
        }
        rows = await self.store.insert(AGENTS_TABLE, row, error="Failed to create agent", with_detail=True)
        logger.info("agent_created", user_id=self.user_id, name=data.name)
        return rows

    async def start(self, agent_id: str) -> list[dict]:
        now = self.clock()
        values = {
            "status": "running",
            "deployment_info": self._deployment_info(now),
            "last_activity": _iso(now),
            "updated_at": _iso(now),
        }
        rows = await self.store.update(AGENTS_TABLE, self._scope(agent_id), values, error="Failed to deploy agent")
        logger.info("agent_deployed", agent_id=agent_id, matched=len(rows))
        return rows

    async def deploy(self, agent_id: str | None, data: AgentData | None) -> list[dict]:
        """Restart an existing agent, or create and start a new one from `data`."""
        if agent_id:
            return await self.start(agent_id)
        if data is None:
            raise InvalidPayloadError("agentData is required to deploy a new agent")
        return await self.create(data)

    async def stop(self, agent_id: str) -> list[dict]:
        values = {"status": "stopped", "updated_at": _iso(self.clock())}
        rows = await self.store.update(AGENTS_TABLE, self._scope(agent_id), values, error="Failed to stop agent")
        logger.info("agent_stopped", agent_id=agent_id, matched=len(rows))
        return rows

    async def delete(self, agent_id: str) -> DeleteResult:
        await self.store.delete(AGENTS_TABLE, self._scope(agent_id), error="Failed to delete agent")
        logger.info("agent_deleted", agent_id=agent_id)
        return DeleteResult(message="Agent deleted")

    async def status(self, agent_id: str) -> dict:
        agents = await self.store.select(AGENTS_TABLE, self._scope(agent_id), error="Failed to get agent status")
        if not agents:
            raise NotFoundError("Agent not found")

        agent = agents[0]
        if agent.get("status") == "running":
            info = agent.get("deployment_info") or {}
            started = _parse_iso(info.get("deployed_at")) or _parse_iso(agent.get("created_at"))
            uptime = max(0, int((self.clock() - started).total_seconds())) if started else 0
            agent["metrics"] = {**(agent.get("metrics") or {}), "uptime_seconds": uptime}
        return agent
