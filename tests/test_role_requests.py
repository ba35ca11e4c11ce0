import pytest

from ownbroker.errors import InvalidRequest, NotFound, PolicyViolation, StateConflict
from ownbroker.models.user import User, UserRole, UserStatus


def _user(db, uid):
    with db.session() as session:
        return session.get(User, uid)


class TestSubmit:
    def test_submit_creates_pending_request_and_notifies(self, role_requests, notifier, make_user):
        uid = make_user("uma")
        request = role_requests.submit(uid)
        assert request.status == "pending"
        assert request.user_email == "uma@example.com"
        assert request.requested_role == "owner"
        titles = [n.title for n in notifier.list_for_user(uid)]
        assert "Owner Role Request Submitted" in titles

    def test_duplicate_pending_request_conflicts(self, role_requests, make_user):
        uid = make_user("uma")
        role_requests.submit(uid)
        with pytest.raises(StateConflict) as info:
            role_requests.submit(uid)
        assert info.value.current_status == "pending"

    def test_only_plain_active_users_may_request(self, role_requests, make_user):
        owner = make_user("oscar", role=UserRole.owner)
        suspended = make_user("sam", status=UserStatus.suspended)
        with pytest.raises(PolicyViolation):
            role_requests.submit(owner)
        with pytest.raises(PolicyViolation):
            role_requests.submit(suspended)
        with pytest.raises(NotFound):
            role_requests.submit("ghost")

    def test_resubmit_after_rejection_reuses_row(self, role_requests, make_user):
        uid = make_user("uma")
        first = role_requests.submit(uid)
        role_requests.reject(first.id, uid, "Missing documents")

        again = role_requests.submit(uid)
        assert again.id == first.id
        assert again.status == "pending"
        assert again.admin_notes is None
        assert again.action_timestamp is None
        assert len(role_requests.list_requests()) == 1


class TestDecisions:
    def test_approve_promotes_user_atomically(self, db, role_requests, notifier, make_user):
        uid = make_user("uma")
        request = role_requests.submit(uid)
        approved = role_requests.approve(request.id, uid)

        assert approved.status == "approved"
        assert approved.admin_notes == "Approved"
        assert approved.action_timestamp is not None
        user = _user(db, uid)
        assert user.role == "owner"
        assert user.status == "active"
        assert "Owner Role Request Approved" in [n.title for n in notifier.list_for_user(uid)]

    def test_approve_twice_conflicts_and_changes_nothing(self, db, role_requests, make_user):
        uid = make_user("uma")
        request = role_requests.submit(uid)
        role_requests.approve(request.id, uid, "ok")
        with pytest.raises(StateConflict) as info:
            role_requests.approve(request.id, uid)
        assert info.value.current_status == "approved"
        assert role_requests.get_for_user(uid).admin_notes == "ok"

    def test_approve_with_mismatched_user_is_not_found(self, db, role_requests, make_user):
        uid = make_user("uma")
        other = make_user("vic")
        request = role_requests.submit(uid)
        with pytest.raises(NotFound):
            role_requests.approve(request.id, other)
        assert role_requests.get_for_user(uid).status == "pending"
        assert _user(db, other).role == "user"

    def test_approve_missing_request_is_not_found(self, role_requests, make_user):
        uid = make_user("uma")
        with pytest.raises(NotFound):
            role_requests.approve(999, uid)

    def test_reject_requires_notes(self, role_requests, make_user):
        uid = make_user("uma")
        request = role_requests.submit(uid)
        with pytest.raises(InvalidRequest):
            role_requests.reject(request.id, uid, "  ")
        assert role_requests.get_for_user(uid).status == "pending"

    def test_reject_notifies_with_reason(self, db, role_requests, notifier, make_user):
        uid = make_user("uma")
        request = role_requests.submit(uid)
        rejected = role_requests.reject(request.id, uid, "Incomplete profile")
        assert rejected.status == "rejected"
        assert _user(db, uid).role == "user"
        latest = notifier.list_for_user(uid)
        assert any(n.title == "Owner Role Request Rejected" and n.message == "Reason: Incomplete profile" for n in latest)

    def test_list_requests_filters_by_status(self, role_requests, make_user):
        a, b = make_user("uma"), make_user("vic")
        ra = role_requests.submit(a)
        role_requests.submit(b)
        role_requests.approve(ra.id, a)
        assert [r.user_id for r in role_requests.list_requests(status="pending")] == [b]
        assert [r.user_id for r in role_requests.list_requests(status="approved")] == [a]
