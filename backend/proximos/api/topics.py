"""
Topics API: tree of subjects. Reads need a logged-in user; writes need a platform admin.
DELETE /topics/{id}?mode= (empty | cascade | reparent).
"""
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from proximos.database import get_db
from proximos.models.topic import Topic
from proximos.models.user import User
from proximos.schemas.topic import (
    TopicCreateRequest,
    TopicUpdateRequest,
    TopicResponse,
    TopicDetailResponse,
    TopicCountsResponse,
    TopicListResponse,
)
from proximos.services import topics as topic_service
from proximos.api.deps import get_current_user, require_admin, PageParams

router = APIRouter(prefix="/topics", tags=["topics"])


def topic_to_response(t: Topic) -> TopicResponse:
    return TopicResponse(
        id=str(t.public_id),
        parent_id=str(t.parent_public_id) if t.parent_public_id else None,
        name=t.name,
        description=t.description,
        is_active=t.is_active,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


@router.post("", response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
def create_topic(
    data: TopicCreateRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    topic = topic_service.create_topic(db, current_user, data.name, data.description, data.parent_id)
    return topic_to_response(topic)


@router.get("", response_model=TopicListResponse)
def list_topics(
    name: str | None = None,
    parent_id: str | None = Query(None, description="Empty string selects root topics"),
    page: PageParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active topics ordered by name; name is a case-insensitive substring filter."""
    total = topic_service.count_topics(db, name, parent_id)
    rows = topic_service.list_topics(db, page.page_size, page.offset, name, parent_id)
    return TopicListResponse(data=[topic_to_response(t) for t in rows], **page.meta(total))


@router.get("/{topic_id}", response_model=TopicDetailResponse)
def get_topic(topic_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Topic plus content counts over the topic and its active descendants."""
    topic = topic_service.get_active_topic(db, topic_id)
    counts = topic_service.content_counts(db, topic)
    return TopicDetailResponse(
        **topic_to_response(topic).model_dump(),
        content_counts=TopicCountsResponse(**asdict(counts)),
    )


@router.put("/{topic_id}", response_model=TopicResponse)
def update_topic(
    topic_id: str,
    data: TopicUpdateRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Partial update: only fields present in the body are applied."""
    changes = {field: getattr(data, field) for field in data.model_fields_set}
    return topic_to_response(topic_service.update_topic(db, topic_id, changes))


@router.delete("/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_topic(
    topic_id: str,
    mode: str = "",
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    topic_service.delete_topic(db, topic_id, mode)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
