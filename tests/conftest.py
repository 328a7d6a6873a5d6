import pytest

from app.core.config import ProviderConfig, Settings
from app.services.history_store import HistoryStore
from app.services.providers import LLMCaller
from app.services.step_executor import StepExecutor
from app.services.structured_output import StructuredOutputValidator
from app.services.workflow_engine import WorkflowEngine


class FakeProvider:
    """Scripted provider: replays responses in order, or always raises."""

    def __init__(self, name="fake", responses=None, error=None):
        self.name = name
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    async def generate(self, input_text, instruction, json_mode):
        self.calls.append({"input": input_text, "instruction": instruction, "json_mode": json_mode})
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


@pytest.fixture
def no_delay_config():
    return ProviderConfig(mock_delay_seconds=0)


@pytest.fixture
def mock_llm(no_delay_config):
    """Caller with no providers: always answers from the mock layer."""
    return LLMCaller(no_delay_config, providers=[])


@pytest.fixture
def make_executor(no_delay_config):
    def _make(providers=None, max_attempts=2):
        llm = LLMCaller(no_delay_config, providers=providers or [])
        validator = StructuredOutputValidator(llm, max_attempts=max_attempts, backoff_base_seconds=0)
        return StepExecutor(validator, clean_text_delay_seconds=0)
    return _make


@pytest.fixture
def history(tmp_path):
    return HistoryStore(str(tmp_path / "history.json"), max_entries=50)


@pytest.fixture
def engine(make_executor, history):
    return WorkflowEngine(make_executor(), history=history)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        HUGGING_FACE_API_KEY=None,
        GEMINI_API_KEY=None,
        MOCK_DELAY_SECONDS=0,
        CLEAN_TEXT_DELAY_SECONDS=0,
        LLM_RETRY_BACKOFF_SECONDS=0,
        HISTORY_FILE=str(tmp_path / "data" / "history.json"),
    )
