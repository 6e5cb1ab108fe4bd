import pytest

from salesboard.core.errors import AuthorizationError, ConflictError, ForbiddenError, NotFoundError, InvalidInputError
from salesboard.core.roles import AppRole
from salesboard.models.member import Member
from salesboard.services import organization_service as orgs


def _member_id(db, org_id, user_id):
    return db.query(Member).filter(Member.org_id == org_id, Member.user_id == user_id).one().id


def test_creator_becomes_owner(db, owner):
    org = orgs.create_organization(db, owner, "  North Region  ")

    assert org.name == "North Region"
    assert org.slug == "north-region"
    assert [m["role"] for m in orgs.list_members(db, org.id, owner)] == ["owner"]


def test_duplicate_slug_is_rejected(db, org, outsider):
    with pytest.raises(ConflictError):
        orgs.create_organization(db, outsider, "Acme Two", slug="acme")


def test_blank_name_is_rejected(db, owner):
    with pytest.raises(InvalidInputError):
        orgs.create_organization(db, owner, "   ")


def test_personal_organization_slug_is_made_unique(db, make_user):
    first = orgs.create_personal_organization(db, make_user("a@test.com", name="Sam"))
    second = orgs.create_personal_organization(db, make_user("b@test.com", name="Sam"))
    anonymous = orgs.create_personal_organization(db, make_user("c@test.com"))

    assert first.slug == "sam-s-organization"
    assert second.slug == "sam-s-organization-1"
    assert anonymous.name == "My Organization"


def test_list_organizations_only_shows_memberships(db, org, outsider, super_admin):
    own = orgs.create_organization(db, outsider, "Outpost")

    assert [o.id for o in orgs.list_organizations(db, outsider)] == [own.id]
    assert {o.id for o in orgs.list_organizations(db, super_admin)} == {org.id, own.id}


def test_invite_requires_existing_user(db, org, owner):
    with pytest.raises(NotFoundError) as exc:
        orgs.invite_member(db, org.id, owner, "ghost@test.com", "member")
    assert exc.value.detail == "User not found. They must sign up first."


def test_invite_rejects_existing_member(db, org, owner, outsider):
    orgs.invite_member(db, org.id, owner, outsider.email, "member")
    with pytest.raises(ConflictError):
        orgs.invite_member(db, org.id, owner, outsider.email, "admin")


def test_invite_rejects_owner_role(db, org, owner, outsider):
    with pytest.raises(InvalidInputError):
        orgs.invite_member(db, org.id, owner, outsider.email, "owner")


def test_members_cannot_invite(db, org, owner, outsider, make_user):
    orgs.invite_member(db, org.id, owner, outsider.email, "member")
    newcomer = make_user("new@test.com")
    with pytest.raises(ForbiddenError):
        orgs.invite_member(db, org.id, outsider, newcomer.email, "member")


def test_only_owner_changes_roles(db, org, owner, outsider):
    orgs.invite_member(db, org.id, owner, outsider.email, "admin")
    member_id = _member_id(db, org.id, outsider.id)

    with pytest.raises(ForbiddenError):
        orgs.update_member_role(db, org.id, outsider, member_id, "member")
    updated = orgs.update_member_role(db, org.id, owner, member_id, "member")
    assert updated.role == "member"


def test_last_owner_cannot_be_demoted(db, org, owner):
    with pytest.raises(ConflictError):
        orgs.update_member_role(db, org.id, owner, _member_id(db, org.id, owner.id), "admin")


def test_admin_removes_member_but_not_admin(db, org, owner, outsider, make_user):
    orgs.invite_member(db, org.id, owner, outsider.email, "admin")
    other_admin = make_user("admin2@test.com")
    plain = make_user("plain@test.com")
    orgs.invite_member(db, org.id, owner, other_admin.email, "admin")
    orgs.invite_member(db, org.id, owner, plain.email, "member")

    with pytest.raises(ForbiddenError):
        orgs.remove_member(db, org.id, outsider, _member_id(db, org.id, other_admin.id))
    orgs.remove_member(db, org.id, outsider, _member_id(db, org.id, plain.id))
    assert db.query(Member).filter(Member.user_id == plain.id).count() == 0


def test_member_cannot_remove_others(db, org, owner, outsider, make_user):
    peer = make_user("peer@test.com")
    orgs.invite_member(db, org.id, owner, outsider.email, "member")
    orgs.invite_member(db, org.id, owner, peer.email, "member")

    with pytest.raises(ForbiddenError):
        orgs.remove_member(db, org.id, outsider, _member_id(db, org.id, peer.id))


def test_non_member_cannot_remove(db, org, owner, outsider):
    with pytest.raises(AuthorizationError):
        orgs.remove_member(db, org.id, outsider, _member_id(db, org.id, owner.id))


def test_last_owner_cannot_leave(db, org, owner, outsider):
    with pytest.raises(ConflictError):
        orgs.leave_organization(db, org.id, owner)

    orgs.invite_member(db, org.id, owner, outsider.email, "member")
    orgs.leave_organization(db, org.id, outsider)
    with pytest.raises(NotFoundError):
        orgs.leave_organization(db, org.id, outsider)


def test_bootstrap_super_admin_only_once(db, owner, outsider):
    assignment = orgs.bootstrap_super_admin(db, owner)

    assert assignment.role == AppRole.super_admin.value
    assert orgs.get_app_role(db, owner.id) == "super_admin"
    with pytest.raises(ConflictError):
        orgs.bootstrap_super_admin(db, outsider)


def test_invalid_app_role_is_rejected(db, owner):
    with pytest.raises(InvalidInputError):
        orgs.set_app_role(db, owner.id, "wizard")
