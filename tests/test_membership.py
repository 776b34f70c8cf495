import pytest
from datetime import date

from hrdesk.core.exceptions import InvalidInputError, NotAuthorizedError
from hrdesk.models.employee_history import JobInformation
from hrdesk.services.membership import (
    MembershipResolver,
    find_membership,
    is_manager,
    require_manager_or_owner,
    require_owner,
    require_self,
    require_self_manager_or_owner,
)


def test_resolve_owner_membership(db_session, company):
    owner, comp, profile = company
    resolved = MembershipResolver(db_session).resolve(owner.id, comp.id)

    assert resolved.company_id == comp.id
    assert resolved.employee_profile_id == profile.id
    assert resolved.role_name == "owner"
    assert resolved.is_owner


def test_resolve_rejects_outsider(db_session, company, company_factory):
    _, comp, _ = company
    other_owner, _, _ = company_factory()

    with pytest.raises(NotAuthorizedError):
        MembershipResolver(db_session).resolve(other_owner.id, comp.id)


@pytest.mark.parametrize("user_id, company_id", [(0, 1), (1, -3), ("7", 1), (True, 1)])
def test_resolve_rejects_malformed_identifiers(db_session, user_id, company_id):
    with pytest.raises(InvalidInputError):
        MembershipResolver(db_session).resolve(user_id, company_id)


def test_resolve_uses_cache_when_given(db_session, company):
    owner, comp, _ = company
    cache = {}
    resolver = MembershipResolver(db_session, cache=cache)

    first = resolver.resolve(owner.id, comp.id)
    assert cache[(owner.id, comp.id)] is first
    assert resolver.resolve(owner.id, comp.id) is first


def test_membership_without_profile_does_not_count(db_session, company):
    owner, comp, _ = company
    membership = owner.memberships[0]
    membership.employee_profile_id = None

    assert find_membership(owner.memberships, comp.id) is None


def test_employee_without_job_information_has_no_manager_restriction(db_session, company, member_factory):
    _, comp, _ = company
    _, employee = member_factory(comp, first_name="Ann")
    _, other = member_factory(comp, first_name="Bob")

    assert employee.current_job is None
    assert is_manager(other.id, employee)


def test_manager_is_the_current_reports_to(db_session, company, member_factory):
    _, comp, _ = company
    _, manager = member_factory(comp, first_name="Mia", role="manager")
    _, previous = member_factory(comp, first_name="Pat", role="manager")
    _, employee = member_factory(comp, first_name="Eve", reports_to=previous)

    db_session.add(JobInformation(
        employee_profile_id=employee.id,
        effective_date=date(2025, 3, 1),
        job_title="Senior Engineer",
        reports_to_id=manager.id,
    ))
    db_session.commit()
    db_session.refresh(employee)

    assert is_manager(manager.id, employee)
    assert not is_manager(previous.id, employee)


def test_guards(db_session, company, member_factory):
    owner, comp, owner_profile = company
    mgr_user, manager = member_factory(comp, first_name="Mia", role="manager")
    emp_user, employee = member_factory(comp, first_name="Eve", reports_to=manager)
    peer_user, peer = member_factory(comp, first_name="Sam", reports_to=manager)

    resolver = MembershipResolver(db_session)
    as_owner = resolver.resolve(owner.id, comp.id)
    as_manager = resolver.resolve(mgr_user.id, comp.id)
    as_employee = resolver.resolve(emp_user.id, comp.id)
    as_peer = resolver.resolve(peer_user.id, comp.id)

    require_self(as_employee, employee)
    with pytest.raises(NotAuthorizedError):
        require_self(as_peer, employee)

    require_owner(as_owner)
    with pytest.raises(NotAuthorizedError):
        require_owner(as_manager)

    require_manager_or_owner(as_owner, employee)
    require_manager_or_owner(as_manager, employee)
    with pytest.raises(NotAuthorizedError):
        require_manager_or_owner(as_peer, employee)

    require_self_manager_or_owner(as_employee, employee)
    with pytest.raises(NotAuthorizedError):
        require_self_manager_or_owner(as_peer, employee)
