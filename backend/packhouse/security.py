"""Permission gate: role and allow-list checks for views."""

from __future__ import annotations

from fastapi import HTTPException, status

from .schemas import Role, User, View


def _view_value(view_id: View | str) -> str:
    return view_id.value if isinstance(view_id, View) else str(view_id)


def can_access(user: User, view_id: View | str) -> bool:
    """ADMIN sees every view; OPERATOR only the views on its allow-list."""
    if user.role == Role.ADMIN:
        return True
    if user.role == Role.OPERATOR:
        wanted = _view_value(view_id)
        return any(_view_value(tab) == wanted for tab in user.allowed_tabs)
    return False


def visible_views(user: User) -> dict[str, bool]:
    return {view.value: can_access(user, view) for view in View}


def is_admin(user: User) -> bool:
    return user.role == Role.ADMIN


def require_view_access(user: User, view_id: View | str) -> None:
    """Enforce the view gate server-side."""
    if not can_access(user, view_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied: view '{_view_value(view_id)}' not allowed",
        )


def require_admin(user: User) -> None:
    if not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Permission denied: administrator role required",
        )
