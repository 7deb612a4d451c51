import json
from types import SimpleNamespace

import pytest

from sportsreels.exceptions import ConfigurationException, ProviderException
from sportsreels.providers.openai_providers import OpenAIAnalysisProvider

METADATA = {
    "title": "Derby Match",
    "description": "League derby, full match",
    "duration": 5400,
    "match_details": {"opposing_team": "Rivals FC", "venue": "Home Ground"},
    "tagged_players": [{"player_id": "p7", "name": "Sean Murphy", "jersey_number": 7}],
}


class FakeCompletions:

    def __init__(self, content):
        self.content = content
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def provider():
    return OpenAIAnalysisProvider({"api_key": "test-key", "model_name": "gpt-4o"})


def test_api_key_is_required():
    with pytest.raises(ConfigurationException):
        OpenAIAnalysisProvider({})


def test_prompt_carries_metadata_and_format(provider):
    prompt = provider.build_prompt("https://cdn/derby.mp4", "match", "football", METADATA)

    assert "expert football analyst" in prompt
    assert "duration: 5400s" in prompt
    assert "Sean Murphy (#7)" in prompt
    assert "Rivals FC" in prompt
    assert '"playerActions"' in prompt


def test_prompt_format_follows_video_type(provider):
    assert '"keyQuotes"' in provider.build_prompt("u", "interview", "rugby", {"title": "Post-match"})
    assert '"skillDevelopment"' in provider.build_prompt("u", "training", "rugby", {"title": "Session"})


def test_unknown_video_type_is_rejected(provider):
    with pytest.raises(ProviderException):
        provider.build_prompt("u", "documentary", "football", METADATA)


async def test_analyze_parses_json_response(provider):
    completions = FakeCompletions(json.dumps({"summary": "Tight game", "playerActions": []}))
    provider.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    progress = []

    result = await provider.analyze("https://cdn/derby.mp4", "match", "football", METADATA, on_progress=progress.append)

    assert result["summary"] == "Tight game"
    assert result["processingTime"] >= 0
    assert progress == [0.0, 100.0]
    request = completions.requests[0]
    assert request["model"] == "gpt-4o"
    assert request["response_format"] == {"type": "json_object"}
