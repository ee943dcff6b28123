"""
가시성 규칙 단위 테스트 (DB 없이 can_view 만 검증).

"""

import uuid

from app.core.permissions import Identity
from app.models.user import ApprovalStatus, Role
from app.services.visibility import ResourceKind, Visible, can_view, has_no_groups

G1 = uuid.uuid4()
G2 = uuid.uuid4()


def _member(*groups) -> Identity:
    return Identity(user_id=uuid.uuid4(), roles=(Role.USER,), group_ids=frozenset(groups))


def _admin() -> Identity:
    return Identity(user_id=uuid.uuid4(), roles=(Role.ADMIN,))


def _post(*, status=ApprovalStatus.APPROVED, is_public=False, groups=(), owner=None) -> Visible:
    return Visible(
        kind=ResourceKind.POST,
        group_ids=frozenset(groups),
        is_public=is_public,
        status=status,
        owner_id=owner,
    )


def test_public_approved_post_visible_to_everyone():
    assert can_view(_member(), _post(is_public=True))
    assert can_view(_member(G1), _post(is_public=True, groups=[G2]))


def test_group_post_needs_shared_group():
    post = _post(groups=[G1])
    assert can_view(_member(G1), post)
    assert can_view(_member(G1, G2), post)
    assert not can_view(_member(G2), post)
    assert not can_view(_member(), post)


def test_unapproved_post_hidden_from_other_members():
    for status in (ApprovalStatus.PENDING, ApprovalStatus.REJECTED):
        assert not can_view(_member(G1), _post(status=status, is_public=True, groups=[G1]))


def test_author_sees_own_post_in_any_status():
    author = _member()
    assert can_view(author, _post(status=ApprovalStatus.PENDING, owner=author.user_id))
    assert can_view(author, _post(status=ApprovalStatus.REJECTED, owner=author.user_id))


def test_admin_sees_everything():
    admin = _admin()
    assert can_view(admin, _post(status=ApprovalStatus.PENDING, groups=[G1]))
    assert can_view(admin, Visible(kind=ResourceKind.EVENT))
    assert can_view(admin, Visible(kind=ResourceKind.ALBUM, group_ids=frozenset([G2])))
    assert can_view(Identity(user_id=uuid.uuid4(), roles=(Role.SUPER_ADMIN,)), Visible(kind=ResourceKind.EVENT))


def test_events_and_albums_have_no_public_flag():
    event = Visible(kind=ResourceKind.EVENT, group_ids=frozenset([G1]), is_public=True)
    assert not can_view(_member(), event)
    assert not can_view(_member(G2), event)
    assert can_view(_member(G1), event)

    ungrouped = Visible(kind=ResourceKind.ALBUM)
    assert not can_view(_member(G1), ungrouped)


def test_has_no_groups():
    assert has_no_groups(_member())
    assert not has_no_groups(_member(G1))
    assert not has_no_groups(_admin())
