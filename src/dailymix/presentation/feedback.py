import logging

from src.dailymix.application.service import DailyQuestionService
from src.dailymix.domain.models import OptionKey, Question

logger = logging.getLogger(__name__)


def answer_feedback(
    service: DailyQuestionService,
    user_id: str,
    question: Question,
    selected: OptionKey,
) -> tuple[str, bool]:
    """
    Records an answer and returns ``(feedback, saved)``.

    Feedback is "correct" or "wrong" even when the answer could not be
    stored, so the player can still move on.
    """
    try:
        correct = service.submit_answer(user_id, question, selected)
        saved = True
    except Exception:
        logger.warning("Answer for %s was not saved", question.id)
        correct = question.is_correct(selected)
        saved = False
    return ("correct" if correct else "wrong"), saved
