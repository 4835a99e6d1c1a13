"""Wiring of stores, security helpers and services."""

from dataclasses import dataclass
from typing import Optional

from talent_match.config import Settings, settings
from talent_match.security.passwords import PasswordHasher
from talent_match.security.tokens import TokenService
from talent_match.services.applications import ApplicationWorkflow
from talent_match.services.jobs import JobService
from talent_match.services.matches import MatchService
from talent_match.services.users import UserService
from talent_match.storage.base import Stores
from talent_match.storage.memory import create_memory_stores
from talent_match.storage.sql import SqlDatabase, create_sql_stores
from talent_match.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """Every service the HTTP layer and CLI need, built over one set of stores."""
    stores: Stores
    tokens: TokenService
    applications: ApplicationWorkflow
    matches: MatchService
    jobs: JobService
    users: UserService
    database: Optional[SqlDatabase] = None

    @classmethod
    def from_stores(
        cls,
        stores: Stores,
        tokens: TokenService,
        hasher: PasswordHasher,
        database: Optional[SqlDatabase] = None,
    ) -> "ServiceContainer":
        return cls(
            stores=stores,
            tokens=tokens,
            applications=ApplicationWorkflow(
                jobs=stores.jobs,
                users=stores.users,
                applications=stores.applications,
                matches=stores.matches,
            ),
            matches=MatchService(jobs=stores.jobs, users=stores.users, matches=stores.matches),
            jobs=JobService(stores.jobs),
            users=UserService(stores.users, hasher, tokens),
            database=database,
        )

    def close(self) -> None:
        if self.database is not None:
            self.database.dispose()


def build_container(config: Settings = settings) -> ServiceContainer:
    """Build the container for the configured storage backend."""
    tokens = TokenService(
        secret_key=config.jwt_secret_key,
        algorithm=config.jwt_algorithm,
        expiration_hours=config.jwt_expiration_hours,
    )
    hasher = PasswordHasher(iterations=config.password_hash_iterations)

    backend = config.storage_backend.lower()
    if backend == "memory":
        stores = create_memory_stores()
        database = None
    elif backend == "sql":
        database = SqlDatabase(config.database_url, echo=config.database_echo)
        stores = create_sql_stores(database)
    else:
        raise ValueError(f"Unknown storage backend: {config.storage_backend}")

    logger.info("Service container built", storage_backend=backend)
    return ServiceContainer.from_stores(stores, tokens, hasher, database=database)
