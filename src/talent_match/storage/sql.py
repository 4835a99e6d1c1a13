"""SQLAlchemy-backed stores.

Rows reference jobs and users by id only. The (job_id, user_id) pairs of
applications and matches are unique constraints, so a racing second insert
fails at the database with an ``IntegrityError`` that surfaces here as
``DuplicateKeyError``.
"""

import asyncio
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generator, List, Optional, TypeVar

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    func,
    select,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from talent_match.core.errors import DuplicateKeyError, StoreError
from talent_match.core.models import (
    Application,
    ApplicationStatus,
    Job,
    Match,
    MatchStatus,
    Role,
    Talent,
    User,
    build_user,
)
from talent_match.storage.base import (
    ApplicationStore,
    JobStore,
    MatchStore,
    Stores,
    UserStore,
)
from talent_match.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Base = declarative_base()
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String(24), primary_key=True)
    role = Column(String(16), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    location = Column(String(100), nullable=True)
    skills = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class JobRow(Base):
    __tablename__ = "jobs"

    id = Column(String(24), primary_key=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(100), nullable=False)
    required_skills = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(String(24), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ApplicationRow(Base):
    __tablename__ = "applications"

    id = Column(String(24), primary_key=True)
    job_id = Column(String(24), nullable=False)
    user_id = Column(String(24), nullable=False, index=True)
    status = Column(String(16), nullable=False, default=ApplicationStatus.PENDING.value)
    applied_at = Column(DateTime(timezone=True), nullable=False)
    reviewed_by = Column(String(24), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_application_job_user"),
        Index("ix_applications_status", "status"),
        Index("ix_applications_applied_at", "applied_at"),
    )


class MatchRow(Base):
    __tablename__ = "matches"

    id = Column(String(24), primary_key=True)
    job_id = Column(String(24), nullable=False, index=True)
    user_id = Column(String(24), nullable=False, index=True)
    matched_by = Column(String(24), nullable=False)
    status = Column(String(16), nullable=False, default=MatchStatus.MATCHED.value)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_match_job_user"),
    )


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back out
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _user_from_row(row: UserRow) -> User:
    fields: Dict[str, Any] = {
        "id": row.id,
        "name": row.name,
        "email": row.email,
        "password_hash": row.password_hash,
        "created_at": _aware(row.created_at),
    }
    if row.role == Role.TALENT.value:
        fields["location"] = row.location
        fields["skills"] = list(row.skills or [])
    return build_user(row.role, **fields)


def _job_from_row(row: JobRow) -> Job:
    return Job(
        id=row.id,
        title=row.title,
        description=row.description,
        location=row.location,
        required_skills=list(row.required_skills or []),
        is_active=row.is_active,
        created_by=row.created_by,
        created_at=_aware(row.created_at),
    )


def _application_from_row(row: ApplicationRow) -> Application:
    return Application(
        id=row.id,
        job_id=row.job_id,
        user_id=row.user_id,
        status=ApplicationStatus(row.status),
        applied_at=_aware(row.applied_at),
        reviewed_by=row.reviewed_by,
        reviewed_at=_aware(row.reviewed_at),
    )


def _match_from_row(row: MatchRow) -> Match:
    return Match(
        id=row.id,
        job_id=row.job_id,
        user_id=row.user_id,
        matched_by=row.matched_by,
        status=MatchStatus(row.status),
        created_at=_aware(row.created_at),
    )


class SqlDatabase:
    """Engine and session factory shared by the SQL stores."""

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(pool_pre_ping=True, pool_recycle=3600)

        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        self.logger = logger.bind(component="sql_database")

    def create_all(self) -> None:
        """Create tables and indexes that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)
        self.logger.info("Database schema ensured", url=self.engine.url.render_as_string(hide_password=True))

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    async def run(self, operation: Callable[[Session], T], entity: str = "record",
                  key: Optional[Dict[str, Any]] = None) -> T:
        """Run ``operation`` inside a committed session on a worker thread."""

        def _call() -> T:
            with self.session() as session:
                return operation(session)

        try:
            return await asyncio.to_thread(_call)
        except IntegrityError as e:
            raise DuplicateKeyError(entity, key or {}) from e
        except SQLAlchemyError as e:
            raise StoreError(f"{entity} operation failed: {type(e).__name__}") from e


class SqlJobStore(JobStore):
    def __init__(self, database: SqlDatabase):
        self.db = database

    async def get(self, job_id: str) -> Optional[Job]:
        def op(session: Session) -> Optional[Job]:
            row = session.get(JobRow, job_id)
            return _job_from_row(row) if row else None
        return await self.db.run(op, "Job")

    async def create(self, job: Job) -> Job:
        def op(session: Session) -> Job:
            session.add(JobRow(
                id=job.id,
                title=job.title,
                description=job.description,
                location=job.location,
                required_skills=list(job.required_skills),
                is_active=job.is_active,
                created_by=job.created_by,
                created_at=job.created_at,
            ))
            session.flush()
            return job
        return await self.db.run(op, "Job", {"id": job.id})

    async def list_active(self) -> List[Job]:
        def op(session: Session) -> List[Job]:
            rows = session.scalars(
                select(JobRow).where(JobRow.is_active.is_(True)).order_by(JobRow.created_at.desc())
            )
            return [_job_from_row(row) for row in rows]
        return await self.db.run(op, "Job")

    async def set_active(self, job_id: str, is_active: bool) -> Optional[Job]:
        def op(session: Session) -> Optional[Job]:
            row = session.get(JobRow, job_id)
            if row is None:
                return None
            row.is_active = is_active
            session.flush()
            return _job_from_row(row)
        return await self.db.run(op, "Job")

    async def delete(self, job_id: str) -> bool:
        def op(session: Session) -> bool:
            row = session.get(JobRow, job_id)
            if row is None:
                return False
            session.delete(row)
            return True
        return await self.db.run(op, "Job")


class SqlUserStore(UserStore):
    def __init__(self, database: SqlDatabase):
        self.db = database

    async def get(self, user_id: str) -> Optional[User]:
        def op(session: Session) -> Optional[User]:
            row = session.get(UserRow, user_id)
            return _user_from_row(row) if row else None
        return await self.db.run(op, "User")

    async def get_by_email(self, email: str) -> Optional[User]:
        def op(session: Session) -> Optional[User]:
            row = session.scalars(select(UserRow).where(UserRow.email == email.lower())).first()
            return _user_from_row(row) if row else None
        return await self.db.run(op, "User")

    async def create(self, user: User) -> User:
        def op(session: Session) -> User:
            is_talent = isinstance(user, Talent)
            session.add(UserRow(
                id=user.id,
                role=user.role.value,
                name=user.name,
                email=user.email.lower(),
                password_hash=user.password_hash,
                location=user.location if is_talent else None,
                skills=list(user.skills) if is_talent else None,
                created_at=user.created_at,
            ))
            session.flush()
            return user
        return await self.db.run(op, "User", {"email": user.email.lower()})

    async def list(self, role: Optional[Role] = None) -> List[User]:
        def op(session: Session) -> List[User]:
            query = select(UserRow).order_by(UserRow.created_at.desc())
            if role is not None:
                query = query.where(UserRow.role == role.value)
            return [_user_from_row(row) for row in session.scalars(query)]
        return await self.db.run(op, "User")


class SqlApplicationStore(ApplicationStore):
    def __init__(self, database: SqlDatabase):
        self.db = database

    async def create(self, application: Application) -> Application:
        def op(session: Session) -> Application:
            session.add(ApplicationRow(
                id=application.id,
                job_id=application.job_id,
                user_id=application.user_id,
                status=application.status.value,
                applied_at=application.applied_at,
                reviewed_by=application.reviewed_by,
                reviewed_at=application.reviewed_at,
            ))
            session.flush()
            return application
        key = {"job_id": application.job_id, "user_id": application.user_id}
        return await self.db.run(op, "Application", key)

    async def get(self, application_id: str) -> Optional[Application]:
        def op(session: Session) -> Optional[Application]:
            row = session.get(ApplicationRow, application_id)
            return _application_from_row(row) if row else None
        return await self.db.run(op, "Application")

    async def find_by_job_and_user(self, job_id: str, user_id: str) -> Optional[Application]:
        def op(session: Session) -> Optional[Application]:
            row = session.scalars(
                select(ApplicationRow).where(
                    ApplicationRow.job_id == job_id,
                    ApplicationRow.user_id == user_id,
                )
            ).first()
            return _application_from_row(row) if row else None
        return await self.db.run(op, "Application")

    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        reviewed_by: str,
    ) -> Optional[Application]:
        def op(session: Session) -> Optional[Application]:
            row = session.get(ApplicationRow, application_id)
            if row is None:
                return None
            reviewed = _application_from_row(row).reviewed(status, reviewed_by)
            row.status = reviewed.status.value
            row.reviewed_by = reviewed.reviewed_by
            row.reviewed_at = reviewed.reviewed_at
            session.flush()
            return reviewed
        return await self.db.run(op, "Application")

    async def list(
        self,
        status: Optional[ApplicationStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Application]:
        def op(session: Session) -> List[Application]:
            query = select(ApplicationRow).order_by(ApplicationRow.applied_at.desc())
            if status is not None:
                query = query.where(ApplicationRow.status == status.value)
            rows = session.scalars(query.offset(offset).limit(limit))
            return [_application_from_row(row) for row in rows]
        return await self.db.run(op, "Application")

    async def count(self, status: Optional[ApplicationStatus] = None) -> int:
        def op(session: Session) -> int:
            query = select(func.count()).select_from(ApplicationRow)
            if status is not None:
                query = query.where(ApplicationRow.status == status.value)
            return session.scalar(query) or 0
        return await self.db.run(op, "Application")

    async def list_by_user(self, user_id: str) -> List[Application]:
        def op(session: Session) -> List[Application]:
            rows = session.scalars(
                select(ApplicationRow)
                .where(ApplicationRow.user_id == user_id)
                .order_by(ApplicationRow.applied_at.desc())
            )
            return [_application_from_row(row) for row in rows]
        return await self.db.run(op, "Application")

    async def count_by_status(self) -> Dict[str, int]:
        def op(session: Session) -> Dict[str, int]:
            rows = session.execute(
                select(ApplicationRow.status, func.count()).group_by(ApplicationRow.status)
            )
            return {status: count for status, count in rows}
        return await self.db.run(op, "Application")


class SqlMatchStore(MatchStore):
    def __init__(self, database: SqlDatabase):
        self.db = database

    async def create(self, match: Match) -> Match:
        def op(session: Session) -> Match:
            session.add(MatchRow(
                id=match.id,
                job_id=match.job_id,
                user_id=match.user_id,
                matched_by=match.matched_by,
                status=match.status.value,
                created_at=match.created_at,
            ))
            session.flush()
            return match
        return await self.db.run(op, "Match", {"user_id": match.user_id, "job_id": match.job_id})

    async def find_by_user_and_job(self, user_id: str, job_id: str) -> Optional[Match]:
        def op(session: Session) -> Optional[Match]:
            row = session.scalars(
                select(MatchRow).where(MatchRow.user_id == user_id, MatchRow.job_id == job_id)
            ).first()
            return _match_from_row(row) if row else None
        return await self.db.run(op, "Match")

    async def _list(self, *criteria) -> List[Match]:
        def op(session: Session) -> List[Match]:
            query = select(MatchRow).order_by(MatchRow.created_at.desc())
            if criteria:
                query = query.where(*criteria)
            return [_match_from_row(row) for row in session.scalars(query)]
        return await self.db.run(op, "Match")

    async def list_all(self) -> List[Match]:
        return await self._list()

    async def list_by_user(self, user_id: str) -> List[Match]:
        return await self._list(MatchRow.user_id == user_id)

    async def list_by_job(self, job_id: str) -> List[Match]:
        return await self._list(MatchRow.job_id == job_id)


def create_sql_stores(database: SqlDatabase) -> Stores:
    """Build the SQL store set over one database, creating the schema if needed."""
    database.create_all()
    return Stores(
        jobs=SqlJobStore(database),
        users=SqlUserStore(database),
        applications=SqlApplicationStore(database),
        matches=SqlMatchStore(database),
    )
