import logging
from typing import Optional
from sqlmodel import Session

from quiz_arena.attempts import record_answer, record_attempt
from quiz_arena.database import transactional
from quiz_arena.errors import NotFound, Unauthorized
from quiz_arena.models import (
    QuizResult, QuizStartResponse, QuizSubmission,
    TopicAnalysis, TopicSummary, User,
)
from quiz_arena.questions import fetch_questions_by_ids, fetch_quiz_questions
from quiz_arena.scoring import UnmatchedPolicy, score_answers
from quiz_arena.topics import get_topic_by_slug

logger = logging.getLogger(__name__)

TIME_PER_QUESTION = 30  # seconds, advisory only


def start_quiz(
    session: Session,
    topic_slug: str,
    limit: int = 10,
    difficulty: Optional[str] = None,
    time_per_question: int = TIME_PER_QUESTION,
) -> QuizStartResponse:
    """Resolve the topic and hand out a random question set without answers."""
    topic = get_topic_by_slug(session, topic_slug)
    if topic is None:
        raise NotFound("Topic not found")

    questions = fetch_quiz_questions(session, topic.id, limit, difficulty)
    if not questions:
        raise NotFound("No questions available for this topic")

    logger.info("Quiz started: topic=%s questions=%d", topic.slug, len(questions))

    return QuizStartResponse(
        topic=TopicSummary(
            id=topic.id,
            name=topic.name,
            slug=topic.slug,
            description=topic.description,
            icon=topic.icon,
        ),
        questions=questions,
        total_questions=len(questions),
        time_per_question=time_per_question,
    )


def submit_quiz(
    session: Session,
    user_id: str,
    submission: QuizSubmission,
    policy: UnmatchedPolicy = UnmatchedPolicy.SKIP,
) -> QuizResult:
    """
    Score a submission and store it as a new attempt.

    The attempt and all of its answers are written in one transaction:
    either everything is stored or nothing is. Submitting the same answers
    twice creates two attempts.
    """
    # attempts are owned by a user, so a token for a vanished account is refused
    if session.get(User, user_id) is None:
        raise Unauthorized("User not found. Please login again.")

    topic = get_topic_by_slug(session, submission.topic_slug)
    if topic is None:
        raise NotFound("Topic not found")

    question_ids = [a.question_id for a in submission.answers]
    questions = fetch_questions_by_ids(session, question_ids, topic_id=topic.id)

    card = score_answers(submission.answers, questions, policy)
    if card.unmatched:
        logger.warning(
            "Submission for topic=%s by user=%s has %d unmatched question ids",
            topic.slug, user_id, len(card.unmatched),
        )

    with transactional(session):
        attempt = record_attempt(
            session,
            user_id=user_id,
            topic_id=topic.id,
            score=card.score,
            total=card.total_questions,
            percentage=card.percentage,
            time_taken=submission.total_time,
        )
        for detail in card.answers:
            record_answer(
                session,
                attempt_id=attempt.id,
                question_id=detail.question_id,
                selected=detail.selected_answer,
                is_correct=detail.is_correct,
                time_taken=detail.time_taken,
            )
        attempt_id = attempt.id

    logger.info(
        "Quiz submitted: attempt=%s user=%s topic=%s score=%d/%d grade=%s",
        attempt_id, user_id, topic.slug, card.score, card.total_questions, card.grade,
    )

    return QuizResult(
        attempt_id=attempt_id,
        score=card.score,
        total_questions=card.total_questions,
        percentage=card.percentage,
        grade=card.grade,
        feedback=card.feedback,
        time_taken=submission.total_time,
        answers=card.answers,
        topic_analysis=TopicAnalysis(
            topic=topic.name,
            correct=card.score,
            total=card.total_questions,
            percentage=card.percentage,
        ),
    )
