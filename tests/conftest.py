"""Shared fixtures: environment, per-test SQLite database and user factories."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import anyio
import pytest

_DEFAULT_DB_PATH = Path(tempfile.gettempdir()) / "minicrm_test_default.db"
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DEFAULT_DB_PATH}")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)

from minicrm.config import get_settings, reset_settings_cache  # noqa: E402

reset_settings_cache()

from minicrm.domain.entities import (  # noqa: E402
    EMAIL_STATUS_PENDING,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    ROLE_SUPER_ADMIN,
    ScheduledEmail,
    User,
)
from minicrm.infrastructure.database import (  # noqa: E402
    create_database_engine,
    create_session_factory,
    initialize_database,
)
from minicrm.infrastructure.email import EmailSendResult, OutboundEmail  # noqa: E402
from minicrm.infrastructure.repositories import (  # noqa: E402
    RoleRepository,
    ScheduledEmailRepository,
    UserRepository,
)
from minicrm.infrastructure.security import get_password_hash  # noqa: E402

DEFAULT_PASSWORD = "Secret123!"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def engine(tmp_path):
    engine = create_database_engine(f"sqlite:///{tmp_path / 'minicrm.db'}")
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = create_session_factory(engine)
    with factory() as session:
        RoleRepository(session).ensure_default_roles()
    return factory


@pytest.fixture
def session(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    """Return a factory inserting users with a hashed ``DEFAULT_PASSWORD``."""

    counter = {"value": 0}
    password_hash = get_password_hash(DEFAULT_PASSWORD)

    def _make_user(
        role: str = ROLE_EMPLOYEE,
        *,
        email: str | None = None,
        company_id: int | None = 1,
        is_active: bool = True,
        first_name: str = "Test",
        last_name: str | None = None,
    ) -> User:
        counter["value"] += 1
        number = counter["value"]
        with session_factory() as session:
            role_entity = RoleRepository(session).get_by_alias(role)
            return UserRepository(session).create(
                User(
                    id=None,
                    role=role_entity,
                    first_name=first_name,
                    last_name=last_name or f"User{number}",
                    email=email or f"user{number}@example.com",
                    password=password_hash,
                    phone=None,
                    avatar=None,
                    company_id=None if role == ROLE_SUPER_ADMIN else company_id,
                    is_active=is_active,
                    created_by=None,
                    created_at=None,
                    updated_at=None,
                )
            )

    return _make_user


@pytest.fixture
def super_admin(make_user) -> User:
    return make_user(ROLE_SUPER_ADMIN, email="admin@example.com", first_name="Ada")


@pytest.fixture
def manager(make_user) -> User:
    return make_user(ROLE_MANAGER, email="manager@example.com", first_name="Mia", company_id=1)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def make_email(session_factory):
    """Return a factory inserting scheduled emails created by a given user."""

    def _make_email(
        creator: User,
        *,
        to_email: str = "client@example.com",
        status: str = EMAIL_STATUS_PENDING,
        send_now: bool = True,
        scheduled_for=None,
        template: str = "default",
        subject: str = "Quarterly update",
        company_id: int | None = None,
    ) -> ScheduledEmail:
        with session_factory() as session:
            return ScheduledEmailRepository(session).create(
                ScheduledEmail(
                    id=None,
                    from_name=creator.full_name,
                    from_email=creator.email,
                    to_name="Client",
                    to_email=to_email,
                    subject=subject,
                    message="Hello there.\nSee you soon.",
                    template=template,
                    send_now=send_now,
                    scheduled_for=scheduled_for,
                    status=status,
                    created_by=creator.id,
                    company_id=company_id if company_id is not None else creator.company_id,
                )
            )

    return _make_email


class FakeTransport:
    """Async transport recording every message and the peak concurrency."""

    def __init__(
        self,
        *,
        raise_for=(),
        fail_for=(),
        delay: float = 0.0,
        delay_for=(),
        gate: anyio.Event | None = None,
        on_send=None,
    ) -> None:
        self.raise_for = set(raise_for)
        self.fail_for = set(fail_for)
        self.delay = delay
        self.delay_for = set(delay_for)
        self.gate = gate
        self.on_send = on_send
        self.messages: list[OutboundEmail] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def recipients(self) -> list[str]:
        return [message.to_email for message in self.messages]

    async def __call__(self, email: OutboundEmail) -> EmailSendResult:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay and (not self.delay_for or email.to_email in self.delay_for):
                await anyio.sleep(self.delay)
            if email.to_email in self.raise_for:
                raise RuntimeError(f"transport exploded for {email.to_email}")
            if self.on_send is not None:
                self.on_send(email)
            self.messages.append(email)
            if email.to_email in self.fail_for:
                return EmailSendResult.failed("Mailbox unavailable", 550)
            return EmailSendResult.ok(202)
        finally:
            self.in_flight -= 1


@pytest.fixture
def transport_factory():
    return FakeTransport


@pytest.fixture
def default_password() -> str:
    return DEFAULT_PASSWORD
