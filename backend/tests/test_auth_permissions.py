from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from packhouse.auth import ViewAccessChecker, get_current_admin
from packhouse.schemas import Role, View
from packhouse.security import can_access, require_admin, require_view_access, visible_views


def _user(role, allowed_tabs=()) -> SimpleNamespace:
    return SimpleNamespace(id="u1", name="User", role=role, allowed_tabs=list(allowed_tabs))


@pytest.mark.parametrize("view", list(View))
def test_admin_sees_every_view_regardless_of_allow_list(view: View) -> None:
    assert can_access(_user(Role.ADMIN), view) is True


@pytest.mark.parametrize(
    ("allowed_tabs", "view", "expected"),
    [
        ([View.PRODUCTION], View.PRODUCTION, True),
        ([View.PRODUCTION], View.STOCK, False),
        ([View.STOCK, View.INSIGHTS], "insights", True),
        (["management"], View.MANAGEMENT, True),
        ([], View.PRODUCTION, False),
    ],
)
def test_operator_access_follows_allow_list(allowed_tabs, view, expected: bool) -> None:
    assert can_access(_user(Role.OPERATOR, allowed_tabs), view) is expected


def test_unknown_role_sees_nothing() -> None:
    assert can_access(_user("GUEST", list(View)), View.PRODUCTION) is False


def test_visible_views_reports_every_view() -> None:
    views = visible_views(_user(Role.OPERATOR, [View.PRODUCTION, View.STOCK]))

    assert views == {
        "production": True,
        "prestation_prod": False,
        "prestation_etuvage": False,
        "stock": True,
        "insights": False,
        "management": False,
    }


def test_require_view_access_raises_403_for_missing_view() -> None:
    with pytest.raises(HTTPException) as exc:
        require_view_access(_user(Role.OPERATOR, [View.PRODUCTION]), View.MANAGEMENT)

    assert exc.value.status_code == 403


def test_view_access_checker_returns_the_user_when_allowed() -> None:
    user = _user(Role.OPERATOR, [View.STOCK])

    assert ViewAccessChecker(View.STOCK)(current_user=user) is user


def test_admin_dependency_rejects_operators() -> None:
    admin = _user(Role.ADMIN)

    assert get_current_admin(current_user=admin) is admin
    with pytest.raises(HTTPException) as exc:
        require_admin(_user(Role.OPERATOR, list(View)))
    assert exc.value.status_code == 403
