"""
Groups API: create (any user, becomes group admin), get, my groups, members (add/list/remove).
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from proximos.database import get_db
from proximos.models.group import Group, GroupMember
from proximos.models.user import User
from proximos.schemas.group import GroupCreateRequest, GroupResponse, GroupListResponse, AddMemberRequest, MemberResponse
from proximos.services import groups as group_service
from proximos.api.deps import get_current_user, PageParams

router = APIRouter(tags=["groups"])


def group_to_response(g: Group) -> GroupResponse:
    return GroupResponse(
        id=str(g.public_id),
        name=g.name,
        description=g.description,
        access_type=g.access_type,
        visibility_type=g.visibility_type,
        is_active=g.is_active,
        created_at=g.created_at,
        updated_at=g.updated_at,
    )


def member_to_response(m: GroupMember) -> MemberResponse:
    return MemberResponse(
        user_id=str(m.user.public_id), name=m.user.name, email=m.user.email, role=m.role, joined_at=m.joined_at
    )


@router.post("/groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_group(data: GroupCreateRequest, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    group = group_service.create_group(
        db, current_user, data.name, data.description, data.access_type, data.visibility_type
    )
    return group_to_response(group)


@router.get("/me/groups", response_model=GroupListResponse)
def list_my_groups(
    page: PageParams = Depends(), current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    total = group_service.count_my_groups(db, current_user)
    rows = group_service.list_my_groups(db, current_user, page.page_size, page.offset)
    return GroupListResponse(data=[group_to_response(g) for g in rows], **page.meta(total))


@router.get("/groups/{group_id}", response_model=GroupResponse)
def get_group(group_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return group_to_response(group_service.get_visible_group(db, group_id, current_user))


@router.post("/groups/{group_id}/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def add_member(
    group_id: str,
    data: AddMemberRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    member = group_service.add_member(db, group_id, current_user, data.user_id, data.role)
    return member_to_response(member)


@router.get("/groups/{group_id}/members", response_model=list[MemberResponse])
def list_members(group_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [member_to_response(m) for m in group_service.list_members(db, group_id, current_user)]


@router.delete("/groups/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    group_id: str, user_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    group_service.remove_member(db, group_id, current_user, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
