from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi import HTTPException

from findbids.application.ports.employee_repo import EmployeeDto
from findbids.application.ports.user_repo import UserDto
from findbids.application.services.account_service import AccountService
from findbids.application.services.employee_service import EmployeeService


def make_user(id: int = 1, email: str = "owner@co.com") -> UserDto:
    return UserDto(id=id, email=email, company_name="Co", status="active", created_at=datetime.now(timezone.utc))


class FakeUserRepo:
    def __init__(self, *users):
        self.users = {u.id: u for u in users}
        self.deleted = []

    def update_fields(self, user_id, fields):
        user = self.users.get(user_id)
        if not user:
            return None
        self.users[user_id] = replace(user, **fields)
        return self.users[user_id]

    def delete(self, user_id):
        self.deleted.append(user_id)
        self.users.pop(user_id, None)


class FakeSessionRepo:
    def __init__(self, count=0):
        self.count = count
        self.revoked_for = []

    def delete_for_user(self, user_id):
        self.revoked_for.append(user_id)
        return self.count


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, resource, user_id=None, ip_address=None, success=True, details=None):
        self.entries.append((action, user_id, ip_address))


def test_settings_update_only_touches_profile_fields():
    user = make_user()
    repo = FakeUserRepo(user)
    svc = AccountService(repo, FakeSessionRepo())
    updated = svc.update_settings(user, {"trade": "Roofing", "status": "active", "email": "x@y.com"})
    assert updated.trade == "Roofing"
    assert updated.email == "owner@co.com"


def test_settings_reject_blank_company_name():
    user = make_user()
    svc = AccountService(FakeUserRepo(user), FakeSessionRepo())
    with pytest.raises(HTTPException) as exc:
        svc.update_settings(user, {"company_name": "   "})
    assert exc.value.status_code == 400


def test_onboarding_marks_profile_complete():
    user = make_user()
    svc = AccountService(FakeUserRepo(user), FakeSessionRepo())
    updated = svc.complete_onboarding(user, {"contact": "Sam", "cell": "555-0100", "is_minority_owned": True})
    assert updated.onboarding_complete is True
    assert updated.contact == "Sam"
    assert updated.is_minority_owned is True


def test_deactivate_revokes_every_session_and_audits():
    user = make_user()
    sessions = FakeSessionRepo(count=3)
    audit = FakeAudit()
    svc = AccountService(FakeUserRepo(user), sessions, audit)
    updated = svc.deactivate(user, "10.0.0.1")
    assert updated.status == "deactivated"
    assert sessions.revoked_for == [user.id]
    assert audit.entries == [("account_deactivate", user.id, "10.0.0.1")]


def test_update_for_missing_user_is_404():
    svc = AccountService(FakeUserRepo(), FakeSessionRepo())
    with pytest.raises(HTTPException) as exc:
        svc.deactivate(make_user(id=99))
    assert exc.value.status_code == 404


def test_delete_account_removes_user():
    user = make_user()
    repo = FakeUserRepo(user)
    audit = FakeAudit()
    AccountService(repo, FakeSessionRepo(), audit).delete_account(user)
    assert repo.deleted == [user.id]
    assert audit.entries[0][0] == "account_delete"


class FakeEmployeeRepo:
    def __init__(self):
        self.rows = {}
        self.deleted = []

    def list_for_organization(self, organization_id):
        return [e for e in self.rows.values() if e.organization_id == organization_id]

    def get(self, employee_id):
        return self.rows.get(employee_id)

    def get_by_email(self, organization_id, email):
        return next((e for e in self.rows.values()
                     if e.organization_id == organization_id and e.email.lower() == email.lower()), None)

    def create(self, organization_id, email, role):
        e = EmployeeDto(id=len(self.rows) + 1, organization_id=organization_id, email=email, role=role,
                        status="pending", created_at=datetime.now(timezone.utc))
        self.rows[e.id] = e
        return e

    def delete(self, employee_id):
        self.deleted.append(employee_id)
        self.rows.pop(employee_id, None)


def test_employees_are_scoped_to_their_organization():
    repo = FakeEmployeeRepo()
    svc = EmployeeService(repo)
    owner, other = make_user(1), make_user(2, "other@co.com")
    svc.add(owner, "estimator@co.com", "Estimator")
    svc.add(other, "pm@other.com", "Project Manager")
    assert [e.email for e in svc.list(owner)] == ["estimator@co.com"]


def test_duplicate_employee_email_rejected():
    svc = EmployeeService(FakeEmployeeRepo())
    owner = make_user()
    svc.add(owner, "estimator@co.com", "Estimator")
    with pytest.raises(HTTPException) as exc:
        svc.add(owner, "Estimator@CO.com", "Estimator")
    assert exc.value.status_code == 400


def test_remove_employee_checks_ownership():
    repo = FakeEmployeeRepo()
    svc = EmployeeService(repo)
    owner, other = make_user(1), make_user(2, "other@co.com")
    employee = svc.add(owner, "estimator@co.com", "Estimator")

    with pytest.raises(HTTPException) as exc:
        svc.remove(other, employee.id)
    assert exc.value.status_code == 403
    with pytest.raises(HTTPException) as exc:
        svc.remove(owner, 999)
    assert exc.value.status_code == 404

    svc.remove(owner, employee.id)
    assert repo.deleted == [employee.id]
