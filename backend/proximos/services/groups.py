"""
Groups (classrooms) and membership. The creator joins as an accepted admin.
Private groups are invisible (GROUP_NOT_FOUND) to users who are neither members nor platform admins.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from proximos import errors
from proximos.models.group import Group, GroupMember, MemberRole
from proximos.models.types import parse_public_id
from proximos.models.user import User
from proximos.services.common import clean_required, clean_optional, write_transaction

logger = logging.getLogger(__name__)

ACCESS_TYPES = ("open", "closed")
VISIBILITY_TYPES = ("public", "private")


def get_membership(db: Session, group: Group, user: User) -> GroupMember | None:
    """Accepted membership of user in group, or None."""
    member = db.get(GroupMember, (group.id, user.id))
    if member is None or not member.is_accepted:
        return None
    return member


def is_group_admin(db: Session, group: Group, user: User) -> bool:
    member = get_membership(db, group, user)
    return member is not None and member.is_admin


def is_group_member(db: Session, group: Group, user: User) -> bool:
    return get_membership(db, group, user) is not None


def get_active_group(db: Session, public_id) -> Group:
    pid = parse_public_id(public_id)
    group = db.scalar(select(Group).where(Group.public_id == pid, Group.active())) if pid else None
    if group is None:
        raise errors.group_not_found()
    return group


def get_visible_group(db: Session, public_id, user: User) -> Group:
    group = get_active_group(db, public_id)
    if group.visibility_type == "private" and not user.is_admin and not is_group_member(db, group, user):
        raise errors.group_not_found()
    return group


def create_group(
    db: Session,
    actor: User,
    name: str,
    description: str | None = None,
    access_type: str | None = None,
    visibility_type: str | None = None,
) -> Group:
    access = access_type or "closed"
    visibility = visibility_type or "private"
    if access not in ACCESS_TYPES:
        raise errors.invalid_input({"access_type": "must be open or closed"})
    if visibility not in VISIBILITY_TYPES:
        raise errors.invalid_input({"visibility_type": "must be public or private"})

    group = Group(
        name=clean_required(name, 255),
        description=clean_optional(description),
        access_type=access,
        visibility_type=visibility,
        created_by_id=actor.id,
    )
    group.members.append(GroupMember(user_id=actor.id, role=MemberRole.ADMIN.value, accepted_by_id=actor.id))
    with write_transaction(db):
        db.add(group)
    db.refresh(group)
    logger.info("Group created: %s by user %s", group.public_id, actor.public_id)
    return group


def _my_groups_query(user: User):
    return (
        select(Group)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user.id, GroupMember.accepted_by_id.is_not(None), Group.active())
    )


def count_my_groups(db: Session, user: User) -> int:
    return db.scalar(select(func.count()).select_from(_my_groups_query(user).subquery())) or 0


def list_my_groups(db: Session, user: User, limit: int, offset: int) -> list[Group]:
    stmt = _my_groups_query(user).order_by(Group.name.asc(), Group.id.asc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


def _require_group_admin(db: Session, group: Group, actor: User) -> None:
    if not actor.is_admin and not is_group_admin(db, group, actor):
        raise errors.forbidden()


def add_member(db: Session, group_public_id, actor: User, user_public_id, role: str | None = None) -> GroupMember:
    """Group admin (or platform admin) adds a user directly, already accepted."""
    group = get_active_group(db, group_public_id)
    _require_group_admin(db, group, actor)
    member_role = role or MemberRole.MEMBER.value
    if member_role not in (MemberRole.ADMIN.value, MemberRole.MEMBER.value):
        raise errors.invalid_input({"role": "must be admin or member"})

    pid = parse_public_id(user_public_id)
    user = db.scalar(select(User).where(User.public_id == pid)) if pid else None
    if user is None:
        raise errors.user_not_found()
    if db.get(GroupMember, (group.id, user.id)) is not None:
        raise errors.member_already_exists()

    member = GroupMember(
        group_id=group.id,
        user_id=user.id,
        role=member_role,
        accepted_by_id=actor.id,
        joined_at=datetime.now(timezone.utc),
    )
    with write_transaction(db, conflict=errors.member_already_exists):
        db.add(member)
    db.refresh(member)
    logger.info("User %s added to group %s as %s", user.public_id, group.public_id, member_role)
    return member


def remove_member(db: Session, group_public_id, actor: User, user_public_id) -> None:
    group = get_active_group(db, group_public_id)
    _require_group_admin(db, group, actor)
    pid = parse_public_id(user_public_id)
    user = db.scalar(select(User).where(User.public_id == pid)) if pid else None
    member = db.get(GroupMember, (group.id, user.id)) if user else None
    if member is None:
        raise errors.member_not_found()
    with write_transaction(db):
        db.delete(member)
    logger.info("User %s removed from group %s", user.public_id, group.public_id)


def list_members(db: Session, group_public_id, actor: User) -> list[GroupMember]:
    group = get_active_group(db, group_public_id)
    if not actor.is_admin and not is_group_member(db, group, actor):
        raise errors.forbidden()
    stmt = (
        select(GroupMember)
        .where(GroupMember.group_id == group.id, GroupMember.accepted_by_id.is_not(None))
        .order_by(GroupMember.joined_at.asc(), GroupMember.user_id.asc())
    )
    return list(db.scalars(stmt))
