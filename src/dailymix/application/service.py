import random
from datetime import date

from pydantic import ValidationError

from src.config import MixConfig
from src.dailymix.domain.mix_allocator import compute_mix
from src.dailymix.domain.models import (
    DailyBundle,
    Difficulty,
    DifficultyRatio,
    OptionKey,
    Question,
)
from src.dailymix.domain.pool_sampler import select_questions
from src.dailymix.domain.ports import IBundleCache, IQuestionRepository
from src.shared.telemetry import Telemetry, measure_time


class DailyQuestionService:
    """
    Builds (or replays from cache) each user's daily question set.
    """

    def __init__(
        self,
        repo: IQuestionRepository,
        cache: IBundleCache,
        rng: random.Random | None = None,
    ) -> None:
        self.repo = repo
        self.cache = cache
        self.rng = rng
        self.telemetry = Telemetry("DailyQuestionService")

    @property
    def repository(self) -> IQuestionRepository:
        return self.repo

    @measure_time("get_daily_bundle")
    def get_daily_bundle(self, user_id: str, today: date | None = None) -> DailyBundle:
        if not user_id:
            raise ValueError("No user id")

        day = (today or date.today()).isoformat()
        key = MixConfig.cache_key(user_id, day)

        cached = self._load_cached(key)
        if cached is not None:
            self.telemetry.log_info("Daily bundle cache hit", user_id=user_id, day=day)
            return cached

        ratio = self._load_ratio(user_id)
        counts = compute_mix(MixConfig.DAILY_TOTAL, ratio.as_mapping())

        pools: dict[Difficulty, list[Question]] = {
            band: self.repo.get_questions_by_difficulty(band, MixConfig.POOL_LIMIT)
            for band, count in counts.items()
            if count > 0
        }

        chosen = select_questions(counts, pools, self.rng)
        bundle = DailyBundle(date=day, counts=counts, questions=chosen)

        if bundle.is_short:
            self.telemetry.record_shortfall(
                counts.total - len(chosen), user_id=user_id, day=day
            )

        self.cache.set(key, bundle.model_dump(mode="json"))
        self._log_selection(user_id, bundle)

        self.telemetry.log_info(
            "Daily bundle built",
            user_id=user_id,
            day=day,
            counts=counts.model_dump(),
            selected=len(chosen),
        )
        return bundle

    @measure_time("submit_answer")
    def submit_answer(
        self, user_id: str, question: Question, selected: OptionKey
    ) -> bool:
        is_correct = question.is_correct(selected)
        try:
            self.repo.save_answer(
                user_id, question.id, selected.value.lower(), is_correct
            )
        except Exception as e:
            self.telemetry.log_error(f"save_answer failed for {user_id}", e)
            raise

        self.telemetry.log_info(
            "Answer Submitted", user_id=user_id, q_id=question.id, correct=is_correct
        )
        return is_correct

    # --- Helpers ---

    def _load_cached(self, key: str) -> DailyBundle | None:
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            return DailyBundle.model_validate(raw)
        except ValidationError as e:
            self.telemetry.log_error("Discarding invalid cached bundle", e, key=key)
            return None

    def _load_ratio(self, user_id: str) -> DifficultyRatio:
        try:
            ratio = self.repo.get_difficulty_ratio(user_id)
        except Exception as e:
            self.telemetry.log_warning(
                "Failed to load profile ratio, using default",
                user_id=user_id,
                error=str(e),
            )
            ratio = None
        if ratio is None:
            return DifficultyRatio(**MixConfig.DEFAULT_RATIO)
        return ratio

    def _log_selection(self, user_id: str, bundle: DailyBundle) -> None:
        # Activity logging must not block the session
        try:
            self.repo.log_activity(
                user_id,
                MixConfig.EVENT_DAILY_SELECTED,
                {
                    "counts": bundle.counts.model_dump(),
                    "ids": [q.id for q in bundle.questions],
                },
            )
        except Exception as e:
            self.telemetry.log_error("log_activity failed", e, user_id=user_id)
