import copy
import json
from pathlib import Path

import pytest

from sentient.application import DashboardController
from sentient.infrastructure.config import LLMSettings
from sentient.infrastructure.llm import GeminiClient, ReviewAnalysisService, create_chat_session

FIXTURES = Path(__file__).parent / "fixtures"

FIXED_PAYLOAD = {
    "executiveSummary": (
        "Customers praise the cleaner UI, speed and support staff, but login "
        "problems, settings crashes and the removed export feature drive churn risk."
    ),
    "topActionableAreas": [
        "Fix the login regression introduced by the latest patch",
        "Stop the settings screen from crashing",
        "Restore the export feature",
    ],
    "sentimentTrend": [
        {"index": 0, "label": "Oct 1-2", "sentimentScore": 0.1},
        {"index": 1, "label": "Oct 3-4", "sentimentScore": -0.35},
        {"index": 2, "label": "Oct 5-6", "sentimentScore": 0.4},
        {"index": 3, "label": "Oct 7-8", "sentimentScore": 0.05},
        {"index": 4, "label": "Oct 9-10", "sentimentScore": 0.75},
    ],
    "wordCloud": [
        {"text": "UI", "value": 3, "sentiment": "POSITIVE"},
        {"text": "crashes", "value": 2, "sentiment": "NEGATIVE"},
        {"text": "export", "value": 1, "sentiment": "NEGATIVE"},
        {"text": "shipping", "value": 1, "sentiment": "NEUTRAL"},
    ],
    "overallSentiment": 24,
}


class StubGeminiClient(GeminiClient):
    """GeminiClient that records calls and replays queued responses."""

    def __init__(self, settings, responses=None):
        super().__init__(settings=settings)
        self.responses = list(responses or [])
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def generate_content(self, model, contents, system_instruction=None, generation_config=None):
        self.require_credentials()
        self.calls.append({
            "model": model,
            "contents": copy.deepcopy(contents),
            "system_instruction": system_instruction,
            "generation_config": generation_config,
        })
        if not self.responses:
            raise AssertionError("StubGeminiClient has no queued response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def llm_settings():
    return LLMSettings(
        api_key="test-key",
        api_base="https://gemini.test/v1beta",
        model="gemini-test",
        chat_model="",
        max_input_chars=50000,
        timeout_seconds=5,
    )


@pytest.fixture
def payload():
    return copy.deepcopy(FIXED_PAYLOAD)


@pytest.fixture
def payload_json(payload):
    return json.dumps(payload)


@pytest.fixture
def stub_client(llm_settings):
    return StubGeminiClient(llm_settings)


@pytest.fixture
def analysis_service(stub_client, llm_settings):
    return ReviewAnalysisService(client=stub_client, settings=llm_settings)


@pytest.fixture
def controller(stub_client, llm_settings, analysis_service):
    return DashboardController(
        analysis_service=analysis_service,
        session_factory=lambda snapshot: create_chat_session(
            snapshot, client=stub_client, settings=llm_settings
        ),
    )


@pytest.fixture
def sample_reviews():
    return (FIXTURES / "sample_reviews.txt").read_text(encoding="utf-8")
