import pytest
import streamlit as st

from src.dailymix.adapters.db_manager import DatabaseManager
from src.dailymix.adapters.sqlite_repository import SQLiteQuestionRepository
from src.dailymix.domain.models import Difficulty
from tests.factories import make_pool, make_question


class MockSessionState(dict):
    """
    Stand-in for st.session_state supporting dict and attribute access.
    """

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as err:
            raise AttributeError(
                f"'MockSessionState' object has no attribute '{name}'"
            ) from err

    def __setattr__(self, name, value):
        self[name] = value

    def __delattr__(self, name):
        try:
            del self[name]
        except KeyError as err:
            raise AttributeError(
                f"'MockSessionState' object has no attribute '{name}'"
            ) from err


@pytest.fixture(autouse=True)
def mock_streamlit_session():
    original_session_state = getattr(st, "session_state", None)
    st.session_state = MockSessionState()

    yield st.session_state

    st.session_state.clear()
    if original_session_state is not None:
        st.session_state = original_session_state


@pytest.fixture
def sample_question():
    return make_question("Q1")


@pytest.fixture
def in_memory_repo():
    """A clean, empty in-memory repository."""
    db_manager = DatabaseManager(db_path=":memory:")
    repo = SQLiteQuestionRepository(db_manager=db_manager)
    yield repo
    db_manager.close()


@pytest.fixture
def populated_repo(in_memory_repo):
    """Repo holding 8 easy, 6 moderate and 4 difficult questions."""
    in_memory_repo.seed_questions(
        make_pool(Difficulty.EASY, 8)
        + make_pool(Difficulty.MODERATE, 6)
        + make_pool(Difficulty.DIFFICULT, 4)
    )
    return in_memory_repo
