from typing import Any, Dict

from sqlalchemy import MetaData, Table
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


class Database:
    """
    Shared database handle that model modules register their tables against.

    Each model module receives the same Database instance and calls define() for the
    tables it owns. Tables end up in both the models registry (by name) and the shared
    MetaData, so sync() can create every registered table at once.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.metadata = MetaData()
        self.models: Dict[str, Table] = {}
        self._synced = False

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "Database":
        return cls(create_async_engine(url, **kwargs))

    def define(self, name: str, *columns: Any, **kwargs: Any) -> Table:
        if name in self.models:
            raise ValueError(f"Model {name} is already defined")
        table = Table(name, self.metadata, *columns, **kwargs)
        self.models[name] = table
        return table

    def __getitem__(self, name: str) -> Table:
        return self.models[name]

    @property
    def synced(self) -> bool:
        return self._synced

    async def sync(self) -> None:
        """Create any registered tables that don't exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(self.metadata.create_all)
        self._synced = True

    async def dispose(self) -> None:
        await self.engine.dispose()
