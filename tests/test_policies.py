"""Tests for scheduled email authorization decisions."""

from __future__ import annotations

import pytest

from minicrm.application.policies import (
    EmailAccess,
    EmailListScope,
    email_list_scope,
    evaluate_email_access,
)

ALL = EmailAccess(can_view=True, can_cancel=True, can_retry=True)
NONE = EmailAccess(can_view=False, can_cancel=False, can_retry=False)


def test_super_admin_can_act_on_any_email(super_admin, make_user, make_email):
    email = make_email(make_user("manager", company_id=9))

    assert evaluate_email_access(super_admin, email) == ALL
    assert email_list_scope(super_admin) == EmailListScope()


def test_creator_can_act_on_own_email(manager, make_email):
    assert evaluate_email_access(manager, make_email(manager)) == ALL


def test_manager_of_same_company_can_only_view(manager, make_user, make_email):
    colleague = make_user("manager", company_id=manager.company_id)
    email = make_email(colleague)

    assert evaluate_email_access(manager, email) == EmailAccess(
        can_view=True, can_cancel=False, can_retry=False
    )


def test_manager_of_other_company_has_no_access(manager, make_user, make_email):
    email = make_email(make_user("manager", company_id=99))

    assert evaluate_email_access(manager, email) == NONE


def test_employee_has_no_access(manager, make_user, make_email):
    employee = make_user("employee", company_id=manager.company_id)
    email = make_email(manager)

    assert evaluate_email_access(employee, email) == NONE
    with pytest.raises(PermissionError):
        email_list_scope(employee)


def test_manager_list_scope_covers_own_and_company_emails(manager):
    assert email_list_scope(manager) == EmailListScope(
        creator_id=manager.id, company_id=manager.company_id
    )
