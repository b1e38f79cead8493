"""
Database configuration and session management

Two kinds of databases are involved: the main database holding the
tenant registry, and one isolated database per tenant. Tenant handles
are built by ``create_tenant_client`` and owned by the tenant manager.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
import structlog

from rentalshop.core.config import get_settings
from rentalshop.core.execution_context import client_context

logger = structlog.get_logger(__name__)
settings = get_settings()


def to_async_url(database_url: str) -> str:
    """Rewrite plain Postgres URLs to the asyncpg driver"""
    for prefix in ("postgresql://", "postgres://"):
        if database_url.startswith(prefix):
            return "postgresql+asyncpg://" + database_url[len(prefix):]
    return database_url


class TenantClient:
    """Database handle bound to a single database URL"""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        # Engines connect lazily, on the first checkout
        self.engine: AsyncEngine = create_async_engine(
            to_async_url(database_url),
            echo=echo,
            future=True,
        )
        self.session_maker = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        """Open a new session on this database"""
        return self.session_maker()

    async def disconnect(self):
        """Close all pooled connections"""
        await self.engine.dispose()

    def __repr__(self) -> str:
        return f"TenantClient({self.engine.url.render_as_string(hide_password=True)})"


def create_tenant_client(database_url: str) -> TenantClient:
    """Build an independent client for a tenant database"""
    return TenantClient(database_url, echo=settings.DEBUG and settings.ENVIRONMENT == "development")


# Main (registry) database
main_engine = create_async_engine(
    to_async_url(settings.MAIN_DATABASE_URL),
    echo=settings.DEBUG,
    future=True,
)

main_session_maker = async_sessionmaker(
    bind=main_engine,
    expire_on_commit=False,
)

# Shared database used when no tenant client is bound
default_client = TenantClient(settings.DATABASE_URL)


def get_active_client() -> TenantClient:
    """Tenant client bound to the current request, or the shared client"""
    return client_context.get_active() or default_client


async def get_session():
    """Dependency to get a session on the active tenant database"""
    async with get_active_client().session() as session:
        yield session
