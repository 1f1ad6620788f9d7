from datetime import timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.in_memory_user_repository import InMemoryIdentityStore
from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from src.adapter.services.notification_dispatcher import LoggingNotificationDispatcher
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.jwt import verify_jwt
from src.app.services.clock import Clock, SystemClock
from src.app.services.notification_dispatcher import INotificationDispatcher
from src.app.services.token_consumer import ResetTokenConsumer
from src.app.services.token_issuer import ResetTokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import ResetHandler

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

memory_store = InMemoryIdentityStore()
notification_dispatcher = LoggingNotificationDispatcher()

security = HTTPBearer()


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_unit_of_work():
    if ApplicationConfig.IDENTITY_STORE_BACKEND == "memory":
        yield InMemoryUnitOfWork(memory_store)
        return
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_clock() -> Clock:
    return SystemClock()


def get_notification_dispatcher() -> INotificationDispatcher:
    return notification_dispatcher


def get_reset_handler(
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Clock = Depends(get_clock),
    dispatcher: INotificationDispatcher = Depends(get_notification_dispatcher),
) -> ResetHandler:
    """Explicit wiring of the password reset flow"""
    return ResetHandler(
        uow=uow,
        clock=clock,
        dispatcher=dispatcher,
        issuer=ResetTokenIssuer(uow, clock),
        consumer=ResetTokenConsumer(
            uow,
            clock,
            ttl=timedelta(hours=ApplicationConfig.RESET_TOKEN_TTL_HOURS),
            bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS,
        ),
        password_min_length=ApplicationConfig.PASSWORD_MIN_LENGTH,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Decoded JWT payload containing user_id, username, user_type

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    token = credentials.credentials
    payload = verify_jwt(token)

    if payload is None or "username" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return payload
