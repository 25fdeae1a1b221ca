import os
from typing import Final


class MixConfig:
    # --- Infrastructure Switch ---
    USE_SQLITE: bool = True
    SQLITE_PATH = "data/dailymix.db"
    SEED_FILE = "data/seed_questions.json"

    # --- App Identity ---
    APP_TITLE = "ThinkBud"

    # --- Daily Session ---
    DAILY_TOTAL: Final[int] = 10
    POOL_LIMIT: Final[int] = 50

    # --- Easy Floor ---
    # At least max(MIN_EASY_FLOOR, round(total * MIN_EASY_SHARE)) easy questions
    MIN_EASY_SHARE: Final[float] = 0.2
    MIN_EASY_FLOOR: Final[int] = 2

    # Used when a profile has no difficulty_ratio stored
    DEFAULT_RATIO: Final[dict[str, float]] = {
        "easy": 0.8,
        "moderate": 0.2,
        "difficult": 0.0,
    }

    # --- Cache ---
    CACHE_PREFIX = "daily-questions"
    CACHE_VERSION = "v1"

    # --- Activity Log ---
    EVENT_DAILY_SELECTED = "daily_questions_selected"

    @staticmethod
    def cache_key(user_id: str, day: str) -> str:
        """Composite key for one user's bundle on one calendar day."""
        return f"{MixConfig.CACHE_PREFIX}:{user_id}:{day}:{MixConfig.CACHE_VERSION}"

    @staticmethod
    def supabase_credentials() -> tuple[str, str] | None:
        """Returns (url, key) from the environment, or None if either is unset."""
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_KEY")
        if not url or not key:
            return None
        return url, key
