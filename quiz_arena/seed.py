import logging
import os
from typing import Optional

import yaml
from sqlmodel import Session, select

from quiz_arena.models import Question, Topic

logger = logging.getLogger(__name__)

SEED_FILE = os.path.join(os.path.dirname(__file__), "seed_data.yaml")


def load_seed_data(path: str = SEED_FILE) -> list[dict]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data.get("topics", [])


def _check_question(topic_slug: str, q: dict):
    options = q.get("options") or []
    if len(options) < 2:
        raise ValueError(f"{topic_slug}: question {q.get('question')!r} needs at least 2 options")
    if not 0 <= q["correct_answer"] < len(options):
        raise ValueError(
            f"{topic_slug}: question {q.get('question')!r} has correct_answer "
            f"{q['correct_answer']} outside 0..{len(options) - 1}"
        )


def seed_database(session: Session, topics: Optional[list[dict]] = None) -> bool:
    """
    Insert starter topics and questions when the topics table is empty.

    Returns True if anything was inserted.
    """
    if session.exec(select(Topic)).first() is not None:
        logger.info("Database already seeded, skipping")
        return False

    if topics is None:
        topics = load_seed_data()

    question_count = 0
    for t in topics:
        topic = Topic(
            name=t["name"],
            slug=t["slug"],
            description=t.get("description"),
            icon=t.get("icon"),
            difficulty=t.get("difficulty", "intermediate"),
        )
        session.add(topic)
        # no relationship declared, so the topic row must exist before its questions
        session.flush()
        for q in t.get("questions", []):
            _check_question(topic.slug, q)
            session.add(Question(
                topic_id=topic.id,
                question=q["question"],
                options=list(q["options"]),
                correct_answer=q["correct_answer"],
                difficulty=q.get("difficulty", "medium"),
                explanation=q.get("explanation"),
            ))
            question_count += 1

    session.commit()
    logger.info("Seeded %d topics and %d questions", len(topics), question_count)
    return True
