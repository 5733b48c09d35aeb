import json
import logging
import aiofiles
import aiofiles.os
from pathlib import Path
from typing import Protocol
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from app.core.config import Settings, get_settings
from app.core.database import Base, async_session_maker, engine
from app.core.exceptions import StateLoadError, StateVersionError
from app.models import StoreStateRecord
from app.schemas.analysis import STATE_VERSION, StoreState

logger = logging.getLogger(__name__)


def encode_state(state: StoreState) -> str:
    return state.model_copy(update={"version": STATE_VERSION}).model_dump_json(by_alias=True)


def decode_state(payload: str) -> StoreState:
    """Parse a persisted payload, refusing anything that would load half-parsed.

    Payloads written before versioning existed have no ``version`` key and are
    read as version 1.
    """
    try:
        raw = json.loads(payload)
    except ValueError as e:
        raise StateLoadError(f"Persisted state is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise StateLoadError("Persisted state must be a JSON object")

    version = raw.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool):
        raise StateLoadError(f"Invalid state version: {version!r}")
    if version > STATE_VERSION:
        raise StateVersionError(version, STATE_VERSION)

    raw["version"] = STATE_VERSION
    try:
        return StoreState.model_validate(raw)
    except ValidationError as e:
        raise StateLoadError(f"Persisted state does not match the current schema: {e}") from e


class StatePersistence(Protocol):
    async def init(self) -> None: ...

    async def load(self) -> StoreState | None: ...

    async def save(self, state: StoreState) -> None: ...


class SqlStatePersistence:
    """Stores the serialized state as one row keyed by namespace."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_maker: async_sessionmaker[AsyncSession],
        namespace: str,
    ):
        self.engine = engine
        self.session_maker = session_maker
        self.namespace = namespace

    async def init(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def load(self) -> StoreState | None:
        async with self.session_maker() as db:
            record = await db.get(StoreStateRecord, self.namespace)
            if record is None:
                return None
            return decode_state(record.payload)

    async def save(self, state: StoreState) -> None:
        payload = encode_state(state)
        async with self.session_maker() as db:
            record = await db.get(StoreStateRecord, self.namespace)
            if record is None:
                db.add(StoreStateRecord(namespace=self.namespace, payload=payload))
            else:
                record.payload = payload
            await db.commit()
        logger.debug("Saved state %s (%d bytes)", self.namespace, len(payload))


class FileStatePersistence:
    """Stores the serialized state as ``<data_dir>/<namespace>.json``."""

    def __init__(self, data_dir: str, namespace: str):
        self.data_dir = Path(data_dir)
        self.namespace = namespace

    def _get_file_path(self, key: str) -> Path:
        """Get file path with path traversal protection."""
        if not key or ".." in key or key.startswith("/") or key.startswith("\\"):
            raise ValueError(f"Invalid storage key: {key}")

        file_path = (self.data_dir / key).resolve()

        if not str(file_path).startswith(str(self.data_dir.resolve())):
            raise ValueError(f"Path traversal attempt detected: {key}")

        return file_path

    @property
    def file_path(self) -> Path:
        return self._get_file_path(f"{self.namespace}.json")

    async def init(self) -> None:
        await aiofiles.os.makedirs(self.data_dir, exist_ok=True)

    async def load(self) -> StoreState | None:
        file_path = self.file_path
        if not await aiofiles.os.path.exists(file_path):
            return None
        async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
            return decode_state(await f.read())

    async def save(self, state: StoreState) -> None:
        file_path = self.file_path
        tmp_path = file_path.with_suffix(".json.tmp")
        await aiofiles.os.makedirs(file_path.parent, exist_ok=True)
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(encode_state(state))
        await aiofiles.os.replace(tmp_path, file_path)


def get_persistence(settings: Settings | None = None) -> StatePersistence:
    settings = settings or get_settings()
    if settings.store_backend == "file":
        return FileStatePersistence(settings.data_dir, settings.store_namespace)

    return SqlStatePersistence(engine, async_session_maker, settings.store_namespace)
