"""Administration use-cases: master data, user accounts, permissions, demo data."""
from __future__ import annotations

import logging
import random
from datetime import date

from ..auth import hash_password
from ..domain_errors import conflict, forbidden, not_found
from ..schemas import (
    MasterData,
    MasterDataCategory,
    RecordKind,
    Role,
    User,
    UserCreate,
    View,
)
from ..security import is_admin
from ..services.sample_data import generate_sample_production
from ..store import RecordStore, new_id, now_ms

logger = logging.getLogger(__name__)

DEFAULT_OPERATOR_TABS: tuple[View, ...] = (View.PRODUCTION,)


# Master data
def add_master_data_value_use_case(
    *,
    store: RecordStore,
    category: MasterDataCategory,
    value: str,
    current_user: User,
) -> MasterData:
    value = value.strip()

    def append(values: list[str]) -> list[str]:
        if value in values:
            raise conflict("MASTER_DATA_DUPLICATE", "Value already exists", category=category.value, value=value)
        return [*values, value]

    updated = store.update_master_data(category, append)
    logger.info("master_data.add category=%s user=%s", category.value, current_user.id)
    return updated


def remove_master_data_value_use_case(
    *,
    store: RecordStore,
    category: MasterDataCategory,
    value: str,
    current_user: User,
) -> MasterData:
    """Remove a vocabulary entry. Records that reference it are left as they are."""

    def drop(values: list[str]) -> list[str]:
        if value not in values:
            raise not_found("MASTER_DATA_NOT_FOUND", "Value not found", category=category.value, value=value)
        return [v for v in values if v != value]

    updated = store.update_master_data(category, drop)
    logger.info("master_data.remove category=%s user=%s", category.value, current_user.id)
    return updated


# Users
def _ensure_admin(current_user: User) -> None:
    if not is_admin(current_user):
        raise forbidden("ADMIN_REQUIRED", "Administrator role required")


def register_first_admin_use_case(*, store: RecordStore, payload: UserCreate) -> User:
    """Bootstrap the installation: allowed only while no account exists."""
    user = User(
        id=new_id(),
        name=payload.name,
        username=payload.username.lower(),
        password_hash=hash_password(payload.password),
        role=Role.ADMIN,
        allowed_tabs=list(View),
        created_at=now_ms(),
    )
    if not store.add_first_user(user):
        raise conflict("ADMIN_ALREADY_REGISTERED", "An administrator is already registered")
    logger.info("users.register_admin user=%s", user.id)
    return user


def create_operator_use_case(*, store: RecordStore, payload: UserCreate, current_user: User) -> User:
    _ensure_admin(current_user)
    user = User(
        id=new_id(),
        name=payload.name,
        username=payload.username.lower(),
        password_hash=hash_password(payload.password),
        role=Role.OPERATOR,
        allowed_tabs=list(DEFAULT_OPERATOR_TABS),
        created_at=now_ms(),
    )
    if not store.add_user_if_username_free(user):
        raise conflict("USERNAME_TAKEN", "Username is already taken", username=user.username)
    logger.info("users.create user=%s by=%s", user.id, current_user.id)
    return user


def delete_user_use_case(*, store: RecordStore, user_id: str, current_user: User) -> None:
    _ensure_admin(current_user)
    if user_id == current_user.id:
        raise conflict("USER_SELF_DELETE", "You cannot delete your own account")
    if not store.delete_user(user_id):
        raise not_found("USER_NOT_FOUND", "User not found", id=user_id)
    logger.info("users.delete user=%s by=%s", user_id, current_user.id)


def update_user_permissions_use_case(
    *,
    store: RecordStore,
    user_id: str,
    allowed_tabs: list[View],
    current_user: User,
) -> User:
    """Replace a user's allow-list. This is the only way the list changes."""
    _ensure_admin(current_user)
    tabs = list(dict.fromkeys(allowed_tabs))
    updated = store.update_user(user_id, {"allowed_tabs": tabs})
    if updated is None:
        raise not_found("USER_NOT_FOUND", "User not found", id=user_id)
    logger.info(
        "users.permissions user=%s tabs=%s by=%s",
        user_id,
        ",".join(tab.value for tab in tabs),
        current_user.id,
    )
    return updated


# Demo data
def generate_sample_data_use_case(
    *,
    store: RecordStore,
    today: date,
    current_user: User,
    rng: random.Random | None = None,
) -> int:
    _ensure_admin(current_user)
    records = generate_sample_production(store.master_data(), today=today, rng=rng, author=current_user)
    store.create_records(RecordKind.PRODUCTION, records)
    logger.info("sample_data.generate count=%s by=%s", len(records), current_user.id)
    return len(records)
