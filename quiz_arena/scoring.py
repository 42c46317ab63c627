from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from quiz_arena.errors import InvalidSubmission
from quiz_arena.models import AnswerDetail, Question, SubmittedAnswer

# (inclusive lower bound, grade, feedback), highest band first
GRADE_BANDS = [
    (90, "A+", "🌟 Outstanding! You're in the top tier! Keep up the excellent work!"),
    (80, "A", "🎉 Excellent work! You have a strong grasp of this topic!"),
    (70, "B+", "💪 Great job! Review the questions you missed to improve further."),
    (60, "B", "👍 Good effort! Focus on your weak areas to reach the next level."),
    (50, "C", "📚 Fair performance. More practice will help solidify your understanding."),
    (40, "D", "🎯 You're getting there! Review the basics and try again."),
]
FAILING_GRADE = ("F", "Keep practicing! Focus on understanding the concepts.")

TWO_PLACES = Decimal("0.01")


class UnmatchedPolicy(str, Enum):
    """What to do with submitted answers whose question can't be found."""

    # drop the answer, keep it in the denominator
    SKIP = "skip"
    # drop the answer and shrink the denominator
    EXCLUDE = "exclude"
    # fail the whole submission
    REJECT = "reject"


@dataclass
class ScoreCard:
    score: int
    total_questions: int
    percentage: float
    grade: str
    feedback: str
    answers: list[AnswerDetail] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)


def round_percentage(correct: int, total: int) -> float:
    """correct/total as a percentage rounded half-up to 2 decimal places."""
    if total <= 0:
        raise InvalidSubmission("Cannot score a quiz with no questions")
    value = Decimal(correct) * 100 / Decimal(total)
    return float(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def grade_for(percentage: float) -> tuple[str, str]:
    """Return (grade, feedback) for a percentage in [0, 100]."""
    for lower_bound, grade, feedback in GRADE_BANDS:
        if percentage >= lower_bound:
            return grade, feedback
    return FAILING_GRADE


def score_answers(
    answers: list[SubmittedAnswer],
    questions: list[Question],
    policy: UnmatchedPolicy = UnmatchedPolicy.SKIP,
) -> ScoreCard:
    """
    Score submitted answers against the authoritative question records.

    Pure: no I/O. Answers are matched to questions by id; a match is
    correct only when the selected index equals the stored correct index.
    Answers without a matching question are handled according to `policy`.
    """
    policy = UnmatchedPolicy(policy)
    if not answers:
        raise InvalidSubmission("Quiz submission must contain at least one answer")

    q_lookup = {q.id: q for q in questions}

    correct_count = 0
    details = []
    unmatched = []

    for ans in answers:
        question = q_lookup.get(ans.question_id)
        if question is None:
            unmatched.append(ans.question_id)
            continue

        is_correct = ans.selected_answer == question.correct_answer
        if is_correct:
            correct_count += 1

        details.append(AnswerDetail(
            question_id=question.id,
            question=question.question,
            options=question.options,
            selected_answer=ans.selected_answer,
            correct_answer=question.correct_answer,
            is_correct=is_correct,
            explanation=question.explanation,
            difficulty=question.difficulty,
            time_taken=ans.time_taken,
        ))

    if unmatched and policy is UnmatchedPolicy.REJECT:
        raise InvalidSubmission(
            "Quiz submission references unknown questions",
            errors=[f"Unknown question_id: {q_id}" for q_id in unmatched],
        )

    if policy is UnmatchedPolicy.EXCLUDE:
        total = len(details)
    else:
        total = len(answers)

    if total == 0:
        raise InvalidSubmission("Quiz submission has no answers that can be scored")

    percentage = round_percentage(correct_count, total)
    grade, feedback = grade_for(percentage)

    return ScoreCard(
        score=correct_count,
        total_questions=total,
        percentage=percentage,
        grade=grade,
        feedback=feedback,
        answers=details,
        unmatched=unmatched,
    )
