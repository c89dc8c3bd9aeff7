from tripcrew.core.database import engine, Base
import tripcrew.models  # noqa: F401  registers every table on Base.metadata


async def init_db(bind=None):
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
