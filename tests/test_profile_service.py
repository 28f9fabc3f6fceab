import pytest

from library_app.errors import (
    ForbiddenError,
    InvalidActionError,
    InvalidArgumentError,
    NoFieldsProvidedError,
    NoPendingRequestError,
    ReservedNameError,
)
from library_app.services.profile_service import ProfileService


def test_member_update_is_staged(member):
    user, applied = ProfileService.submit_update(member.id, member.role, {"name": "Alice Cooper", "phone": "555"})

    assert applied is False
    assert user.name == "Alice Reader"
    assert user.update_status == "pending"
    assert user.pending_update == {"name": "Alice Cooper", "phone": "555"}
    assert user.pending_old_values == {"name": "Alice Reader", "phone": ""}
    assert user.update_requested_at is not None


def test_unknown_fields_are_ignored(member):
    user, _ = ProfileService.submit_update(member.id, member.role, {"bio": "hi", "role": "admin"})
    assert user.pending_update == {"bio": "hi"}
    assert user.role == "member"


def test_admin_update_applies_directly(admin):
    user, applied = ProfileService.submit_update(admin.id, admin.role, {"bio": "runs the place"})

    assert applied is True
    assert user.bio == "runs the place"
    assert user.update_status == "none"
    assert user.pending_update == {}


def test_approve_applies_exactly_the_staged_fields(member, admin):
    ProfileService.submit_update(member.id, member.role, {"name": "Alice Cooper", "email": "NEW@Example.com"})

    user = ProfileService.review_update(member.id, "approve", admin.role)

    assert user.name == "Alice Cooper"
    assert user.email == "new@example.com"
    assert user.phone == ""
    assert user.update_status == "approved"
    assert user.pending_update == {} and user.pending_old_values == {}
    assert user.update_requested_at is None


def test_reject_leaves_profile_unchanged(member, admin):
    ProfileService.submit_update(member.id, member.role, {"name": "Mallory"})

    user = ProfileService.review_update(member.id, "REJECT", admin.role)

    assert user.name == "Alice Reader"
    assert user.update_status == "rejected"
    assert user.pending_update == {}


def test_new_request_replaces_previous(member):
    ProfileService.submit_update(member.id, member.role, {"name": "First"})
    user, _ = ProfileService.submit_update(member.id, member.role, {"bio": "Second"})
    assert user.pending_update == {"bio": "Second"}


def test_reserved_username_refused(member):
    with pytest.raises(ReservedNameError):
        ProfileService.submit_update(member.id, member.role, {"username": "SuperAdmin"})


def test_taken_username_refused(member, other_member):
    with pytest.raises(InvalidArgumentError):
        ProfileService.submit_update(member.id, member.role, {"username": "bob"})


@pytest.mark.parametrize("fields", [{}, {"role": "admin"}, {"name": None}])
def test_no_fields(member, fields):
    with pytest.raises(NoFieldsProvidedError):
        ProfileService.submit_update(member.id, member.role, fields)


def test_non_string_value_refused(member):
    with pytest.raises(InvalidArgumentError):
        ProfileService.submit_update(member.id, member.role, {"phone": 5551234})


def test_only_admin_reviews(member, librarian):
    ProfileService.submit_update(member.id, member.role, {"name": "X"})
    with pytest.raises(ForbiddenError):
        ProfileService.review_update(member.id, "approve", librarian.role)


def test_invalid_action(member, admin):
    ProfileService.submit_update(member.id, member.role, {"name": "X"})
    with pytest.raises(InvalidActionError):
        ProfileService.review_update(member.id, "maybe", admin.role)


def test_no_pending_request(member, admin):
    with pytest.raises(NoPendingRequestError):
        ProfileService.review_update(member.id, "approve", admin.role)


def test_review_twice_refused(member, admin):
    ProfileService.submit_update(member.id, member.role, {"name": "X"})
    ProfileService.review_update(member.id, "approve", admin.role)
    with pytest.raises(NoPendingRequestError):
        ProfileService.review_update(member.id, "reject", admin.role)


def test_list_pending(member, other_member):
    ProfileService.submit_update(member.id, member.role, {"bio": "new bio"})

    rows = ProfileService.list_pending()

    assert len(rows) == 1
    assert rows[0]["username"] == "alice"
    assert rows[0]["pending_fields"] == ["bio"]
    assert rows[0]["pending_old_values"] == {"bio": ""}
