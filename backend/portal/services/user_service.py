"""
User store.

Thin persistence layer for login accounts. Password hashing happens here so
no caller ever writes a plaintext credential to the users table.
"""
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from portal.core.security import get_password_hash, generate_confirmation_token
from portal.core.logging_config import logger
from portal.models.role import Role
from portal.models.user import User, AuthProvider

# Request keys the store knows how to persist; anything else is dropped
USER_WRITABLE_FIELDS = ("username", "email", "provider", "confirmed")


async def find_users_by_email(db: AsyncSession, email: str) -> List[User]:
    """All accounts (any provider) registered with this email"""
    result = await db.execute(select(User).where(User.email == email))
    return list(result.scalars().unique().all())


async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().unique().one_or_none()


async def add_user(db: AsyncSession, params: Dict[str, Any], role_id: str) -> User:
    """
    Create an account from registration params.

    Hashes ``params["password"]`` and commits. IntegrityError from the
    unique indexes propagates to the caller.
    """
    values = {key: params[key] for key in USER_WRITABLE_FIELDS if key in params}
    ignored = sorted(set(params) - set(USER_WRITABLE_FIELDS) - {"password", "role"})
    if ignored:
        logger.debug(f"[Users] Ignoring unknown registration fields: {', '.join(ignored)}")

    user = User(
        **values,
        hashed_password=get_password_hash(params["password"]),
    )
    user.provider = user.provider or AuthProvider.LOCAL.value
    user.confirmed = bool(values.get("confirmed", False))
    user.role = await db.get(Role, role_id)

    db.add(user)
    await db.commit()
    return user


async def issue_confirmation_token(db: AsyncSession, user: User) -> str:
    """Store a fresh confirmation token on the account and return it"""
    token = generate_confirmation_token()
    user.confirmation_token = token
    await db.commit()
    return token


async def confirm_user(db: AsyncSession, confirmation_token: str) -> Optional[User]:
    """
    Confirm the account holding ``confirmation_token``.

    The update is conditional on the account still being unconfirmed, so a
    token can only ever confirm once. Returns None for unknown or spent tokens.
    """
    if not confirmation_token:
        return None

    user_id = await db.scalar(
        select(User.id).where(User.confirmation_token == confirmation_token)
    )
    if user_id is None:
        return None

    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.confirmed.is_(False))
        .values(confirmed=True, confirmation_token=None)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    if result.rowcount != 1:
        return None

    return await get_user_by_id(db, user_id)
