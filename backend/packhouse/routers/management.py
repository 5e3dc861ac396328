"""Management endpoints: master data, users, permissions, demo data and backups."""
from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, status

from ..auth import ViewAccessChecker, get_current_admin, get_current_user
from ..schemas import (
    BackupImportResponse,
    MasterData,
    MasterDataCategory,
    MasterDataValue,
    PermissionsUpdate,
    SampleDataResponse,
    User,
    UserCreate,
    UserResponse,
    View,
)
from ..store import RecordStore, get_record_store
from ..use_cases.backup import export_snapshot_use_case, import_snapshot_use_case
from ..use_cases.management import (
    add_master_data_value_use_case,
    create_operator_use_case,
    delete_user_use_case,
    generate_sample_data_use_case,
    remove_master_data_value_use_case,
    update_user_permissions_use_case,
)

router = APIRouter(prefix="/management", tags=["management"])

can_manage = ViewAccessChecker(View.MANAGEMENT)


# Master data
@router.get("/master-data", response_model=MasterData)
def get_master_data(
    current_user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_record_store),
):
    """Vocabularies for entry forms (readable by every signed-in user)."""
    return store.master_data()


@router.post("/master-data/{category}", response_model=MasterData, status_code=status.HTTP_201_CREATED)
def add_master_data_value(
    category: MasterDataCategory,
    payload: MasterDataValue,
    current_user: User = Depends(can_manage),
    store: RecordStore = Depends(get_record_store),
):
    return add_master_data_value_use_case(
        store=store,
        category=category,
        value=payload.value,
        current_user=current_user,
    )


@router.delete("/master-data/{category}/{value}", response_model=MasterData)
def remove_master_data_value(
    category: MasterDataCategory,
    value: str,
    current_user: User = Depends(can_manage),
    store: RecordStore = Depends(get_record_store),
):
    return remove_master_data_value_use_case(
        store=store,
        category=category,
        value=value,
        current_user=current_user,
    )


# Users
@router.get("/users", response_model=list[UserResponse])
def get_users(
    current_user: User = Depends(get_current_admin),
    store: RecordStore = Depends(get_record_store),
):
    """Get all users."""
    return [UserResponse.model_validate(u) for u in store.users()]


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current_user: User = Depends(get_current_admin),
    store: RecordStore = Depends(get_record_store),
):
    """Create an operator account with the default allow-list."""
    user = create_operator_use_case(store=store, payload=payload, current_user=current_user)
    return UserResponse.model_validate(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_admin),
    store: RecordStore = Depends(get_record_store),
):
    delete_user_use_case(store=store, user_id=user_id, current_user=current_user)


@router.put("/users/{user_id}/permissions", response_model=UserResponse)
def update_user_permissions(
    user_id: str,
    payload: PermissionsUpdate,
    current_user: User = Depends(get_current_admin),
    store: RecordStore = Depends(get_record_store),
):
    user = update_user_permissions_use_case(
        store=store,
        user_id=user_id,
        allowed_tabs=payload.allowed_tabs,
        current_user=current_user,
    )
    return UserResponse.model_validate(user)


# Demo data
@router.post("/sample-data", response_model=SampleDataResponse, status_code=status.HTTP_201_CREATED)
def generate_sample_data(
    current_user: User = Depends(get_current_admin),
    store: RecordStore = Depends(get_record_store),
):
    created = generate_sample_data_use_case(store=store, today=date.today(), current_user=current_user)
    return SampleDataResponse(created=created)


# Backup
@router.get("/backup")
def export_backup(
    current_user: User = Depends(get_current_admin),
    store: RecordStore = Depends(get_record_store),
) -> dict[str, Any]:
    """Whole-store snapshot keyed by persistence key."""
    return export_snapshot_use_case(store=store)


@router.post("/backup", response_model=BackupImportResponse)
def import_backup(
    blob: Any = Body(...),
    current_user: User = Depends(get_current_admin),
    store: RecordStore = Depends(get_record_store),
):
    """Replace every collection with the uploaded snapshot."""
    counts = import_snapshot_use_case(store=store, blob=blob)
    return BackupImportResponse(counts=counts)
