from fastapi import APIRouter, Depends
from sqlmodel import Session
from quiz_arena.database import get_session
from quiz_arena.errors import NotFound
from quiz_arena.models import TopicListResponse, TopicDetailResponse
from quiz_arena.topics import get_all_topics, get_topic_detail

router = APIRouter(prefix="/api/topics", tags=["topics"])


@router.get("", response_model=TopicListResponse)
def list_topics(session: Session = Depends(get_session)):
    """All active topics with their question counts."""
    topics = get_all_topics(session)
    return TopicListResponse(count=len(topics), topics=topics)


@router.get("/{slug}", response_model=TopicDetailResponse)
def topic_details(slug: str, session: Session = Depends(get_session)):
    topic = get_topic_detail(session, slug)
    if not topic:
        raise NotFound("Topic not found")
    return TopicDetailResponse(topic=topic)
