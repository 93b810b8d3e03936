"""
Tests for row-level data scope filtering in OrgAdmin Server
"""

import pytest

from data_scope import BuildDataScopeFilter, GetEffectiveDataScope
from models.api import UserForm, PageRequest
from models.database import Org
from models.infrastructure import CurrentUser


@pytest.fixture
def org_tree(managers, user_service):
    """
    root
    +-- eng
    |   +-- backend
    +-- sales
    +-- engage   (prefix of "eng" must not match)
    """
    session = managers.db.GetSession()
    try:
        session.add_all([
            Org(id="eng", name="Engineering", parent_id="root", parent_ids="root,"),
            Org(id="backend", name="Backend", parent_id="eng", parent_ids="root,eng,"),
            Org(id="sales", name="Sales", parent_id="root", parent_ids="root,"),
            Org(id="engage", name="Engagement", parent_id="root", parent_ids="root,"),
        ])
        session.commit()
    finally:
        session.close()

    users = {}
    for login_id, org_id in (("manager", "eng"), ("dev", "eng"), ("api", "backend"),
                             ("seller", "sales"), ("outreach", "engage")):
        users[login_id] = user_service.Save(UserForm(login_id=login_id, password="secret1", org_id=org_id))
    return users


def VisibleLogins(user_service, current_user):
    page = user_service.FindPage(PageRequest(size=100), BuildDataScopeFilter(current_user))
    return sorted(item.login_id for item in page.items)


def test_effective_scope_picks_widest():
    assert GetEffectiveDataScope(CurrentUser("1", "x", data_scopes=["self", "org"])) == "org"
    assert GetEffectiveDataScope(CurrentUser("1", "x", data_scopes=["org_and_child", "all"])) == "all"
    assert GetEffectiveDataScope(CurrentUser("1", "x", data_scopes=[])) == "self"
    assert GetEffectiveDataScope(CurrentUser("1", "x", data_scopes=["bogus"])) == "self"
    assert GetEffectiveDataScope(CurrentUser("1", "x", authorities=["admin"])) == "all"


def test_org_and_child_scope(user_service, org_tree):
    manager = org_tree["manager"]
    current_user = CurrentUser(manager.id, "manager", org_id="eng", data_scopes=["org_and_child"])

    assert VisibleLogins(user_service, current_user) == ["api", "dev", "manager"]


def test_org_scope(user_service, org_tree):
    manager = org_tree["manager"]
    current_user = CurrentUser(manager.id, "manager", org_id="eng", data_scopes=["org"])

    assert VisibleLogins(user_service, current_user) == ["dev", "manager"]


def test_self_scope(user_service, org_tree):
    seller = org_tree["seller"]
    current_user = CurrentUser(seller.id, "seller", org_id="sales", data_scopes=["self"])

    assert VisibleLogins(user_service, current_user) == ["seller"]


def test_org_scope_without_org_falls_back_to_self(user_service, org_tree):
    loner = user_service.Save(UserForm(login_id="loner", password="secret1"))
    current_user = CurrentUser(loner.id, "loner", org_id=None, data_scopes=["org_and_child"])

    assert VisibleLogins(user_service, current_user) == ["loner"]


def test_all_scope(user_service, org_tree):
    current_user = CurrentUser("anyone", "boss", data_scopes=["all"])

    assert VisibleLogins(user_service, current_user) == [
        "admin", "api", "dev", "manager", "outreach", "seller"
    ]


def test_filter_visible_ids_drops_rows_outside_scope(user_service, org_tree):
    manager = org_tree["manager"]
    current_user = CurrentUser(manager.id, "manager", org_id="eng", data_scopes=["org"])
    requested = [org_tree["seller"].id, org_tree["dev"].id, "missing", manager.id]

    visible = user_service.FilterVisibleIds(requested, BuildDataScopeFilter(current_user))

    assert visible == [org_tree["dev"].id, manager.id]
