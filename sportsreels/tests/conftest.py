import pytest

from sportsreels.config.settings import PipelineConfig
from sportsreels.providers.custom_providers import LocalMetadataStore
from sportsreels.video_pipeline.core.models import MediaFile, UploaderContext
from sportsreels.video_pipeline.ingestion.upload_pipeline import UploadPipeline
from sportsreels.tests.fakes import FakeAnalyzer, FakeCompressor, InMemoryStorage


MATCH_RESULT = {
    "summary": "Derby decided by second-half pressing.",
    "overallRating": 7.5,
    "playerActions": [
        {"timestamp": 12, "action": "pass", "description": "Long diagonal switch", "confidence": 0.9,
         "players": ["Sean Murphy"], "zone": "midfield", "outcome": "successful"},
        {"timestamp": 340, "action": "tackle", "description": "Sliding tackle on the wing", "confidence": 0.8,
         "players": ["Ciaran Walsh"], "zone": "defensive third", "outcome": "successful"},
        {"timestamp": 2710, "action": "shot", "description": "Curling effort from the edge of the box",
         "confidence": 0.95, "players": ["Sean Murphy"], "zone": "attacking third", "outcome": "failed"},
    ],
    "keyMoments": [
        {"timestamp": 2710, "type": "chance", "description": "Best chance of the match", "importance": "high",
         "context": "That should have been the winner", "participants": ["Sean Murphy"]},
    ],
    "insights": ["Pressing after turnovers created most chances"],
    "recommendations": ["Work on finishing under pressure"],
}


@pytest.fixture
def context():
    return UploaderContext(team_id="T1", uploader_id="U1")


@pytest.fixture
def media():
    return MediaFile(filename="derby.mp4", content_type="video/mp4", data=b"\x00\x01" * 2048, duration=5400.0)


@pytest.fixture
def match_metadata():
    return {
        "title": "Derby Match",
        "videoType": "match",
        "description": "League derby, full match",
        "tags": ["derby", "league"],
        "matchDetails": {"opposingTeam": "Rivals FC", "venue": "Home Ground", "score": "1-1"},
        "taggedPlayers": [
            {"playerId": "p7", "name": "Sean Murphy", "jerseyNumber": 7},
            {"playerId": "p4", "name": "Ciaran Walsh", "jerseyNumber": 4},
        ],
    }


@pytest.fixture
def store():
    return LocalMetadataStore({})


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def compressor():
    return FakeCompressor()


@pytest.fixture
def analyzer():
    return FakeAnalyzer(result=MATCH_RESULT)


@pytest.fixture
def pipeline_config():
    return PipelineConfig()


@pytest.fixture
def make_pipeline(context, storage, store, compressor, analyzer, pipeline_config):
    def _make(**overrides):
        kwargs = dict(
            context=context,
            storage=storage,
            metadata_store=store,
            compressor=compressor,
            analyzer=analyzer,
            config=pipeline_config,
        )
        kwargs.update(overrides)
        return UploadPipeline(**kwargs)
    return _make
