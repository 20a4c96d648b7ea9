"""
Activities API.
  - Activities: POST /groups/{id}/activities, GET /groups/{id}/activities/upcoming|past,
    GET|PUT|DELETE /activities/{id}
  - Items: POST|GET /activities/{id}/items, PUT /activities/{id}/items/reorder,
    PUT|DELETE /activity-items/{id}
Writes need a group admin; reads need group membership or a platform admin.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from proximos.database import get_db
from proximos.models.activity import Activity, ActivityItem, ContentKind
from proximos.models.user import User
from proximos.schemas.activity import (
    ActivityCreateRequest,
    ActivityUpdateRequest,
    ActivityResponse,
    ActivityListResponse,
    ActivityItemCreateRequest,
    ActivityItemUpdateRequest,
    ActivityItemResponse,
    ActivityItemListResponse,
    ReorderItemsRequest,
)
from proximos.services import activities as activity_service
from proximos.api.deps import get_current_user, PageParams

router = APIRouter(tags=["activities"])

# Request/response field for each content kind
ITEM_FIELDS = {
    ContentKind.QUESTION: "question_id",
    ContentKind.VIDEO_LESSON: "video_lesson_id",
    ContentKind.HANDOUT: "handout_id",
    ContentKind.EXERCISE_LIST: "open_exercise_list_id",
    ContentKind.SIMULATED_EXAM: "simulated_exam_id",
}


def activity_to_response(a: Activity) -> ActivityResponse:
    return ActivityResponse(
        id=str(a.public_id),
        group_id=str(a.group.public_id),
        title=a.title,
        description=a.description,
        due_date=a.due_date,
        is_active=a.is_active,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


def item_to_response(item: ActivityItem) -> ActivityItemResponse:
    ref = item.content_ref
    fields = {ITEM_FIELDS[ref.kind]: str(item.content.public_id)}
    return ActivityItemResponse(
        id=str(item.public_id),
        activity_id=str(item.activity.public_id),
        order_index=item.order_index,
        title=item.title,
        description=item.description,
        type=item.type,
        created_at=item.created_at,
        updated_at=item.updated_at,
        **fields,
    )


@router.post("/groups/{group_id}/activities", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
def create_activity(
    group_id: str,
    data: ActivityCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    activity = activity_service.create_activity(
        db, group_id, current_user, data.title, data.due_date, data.description
    )
    return activity_to_response(activity)


def _list(group_id: str, upcoming: bool, page: PageParams, current_user: User, db: Session) -> ActivityListResponse:
    rows, total = activity_service.list_activities(db, group_id, current_user, upcoming, page.page_size, page.offset)
    return ActivityListResponse(data=[activity_to_response(a) for a in rows], **page.meta(total))


@router.get("/groups/{group_id}/activities/upcoming", response_model=ActivityListResponse)
def list_upcoming(
    group_id: str,
    page: PageParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Due now or later, soonest first."""
    return _list(group_id, True, page, current_user, db)


@router.get("/groups/{group_id}/activities/past", response_model=ActivityListResponse)
def list_past(
    group_id: str,
    page: PageParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Already due, most recent first."""
    return _list(group_id, False, page, current_user, db)


@router.get("/activities/{activity_id}", response_model=ActivityResponse)
def get_activity(activity_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return activity_to_response(activity_service.get_activity(db, activity_id, current_user))


@router.put("/activities/{activity_id}", response_model=ActivityResponse)
def update_activity(
    activity_id: str,
    data: ActivityUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    changes = {field: getattr(data, field) for field in data.model_fields_set}
    return activity_to_response(activity_service.update_activity(db, activity_id, current_user, changes))


@router.delete("/activities/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(activity_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    activity_service.delete_activity(db, activity_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/activities/{activity_id}/items", response_model=ActivityItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    activity_id: str,
    data: ActivityItemCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Exactly one of the five content ids must be set; the item type is derived from it."""
    references = {kind: getattr(data, field) for kind, field in ITEM_FIELDS.items()}
    item = activity_service.create_item(db, activity_id, current_user, data.title, references, data.description)
    return item_to_response(item)


@router.get("/activities/{activity_id}/items", response_model=ActivityItemListResponse)
def list_items(activity_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    items = activity_service.list_items(db, activity_id, current_user)
    return ActivityItemListResponse(data=[item_to_response(i) for i in items])


@router.put("/activities/{activity_id}/items/reorder", response_model=ActivityItemListResponse)
def reorder_items(
    activity_id: str,
    data: ReorderItemsRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Body lists every item id of the activity once, in the new order."""
    items = activity_service.reorder_items(db, activity_id, current_user, data.item_ids)
    return ActivityItemListResponse(data=[item_to_response(i) for i in items])


@router.put("/activity-items/{item_id}", response_model=ActivityItemResponse)
def update_item(
    item_id: str,
    data: ActivityItemUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    changes = {field: getattr(data, field) for field in data.model_fields_set}
    return item_to_response(activity_service.update_item(db, item_id, current_user, changes))


@router.delete("/activity-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    activity_service.delete_item(db, item_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
