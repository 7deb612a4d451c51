import json
import time
from loguru import logger
from openai import AsyncOpenAI
from typing import Any, Callable, Dict, Optional
from sportsreels.providers.base import AnalysisProvider
from sportsreels.utils.error_handler import handle_exceptions, convert_exceptions
from sportsreels.utils.error_handler import ProviderException, ConfigurationException

SYSTEM_PROMPT = (
    "You are an expert sports video analyst. "
    "Return ONLY valid, complete JSON. No markdown, no code blocks, no extra text."
)

MATCH_FORMAT = """{
  "summary": "Executive summary with critical findings",
  "overallRating": 0-10,
  "playerActions": [{"timestamp": 0, "action": "string", "description": "string", "confidence": 0-1, "players": ["player"], "zone": "string", "outcome": "successful/failed/neutral"}],
  "keyMoments": [{"timestamp": 0, "type": "string", "description": "string", "importance": "critical/high/medium/low", "context": "string", "participants": ["player"]}],
  "playerStats": [{"name": "Player Name", "position": "Position", "rating": 0-10, "actions": {"passes": 0, "shots": 0, "tackles": 0}}],
  "timeline": [{"minute": 0, "label": "string", "events": ["Detailed event description"]}],
  "playerTracking": [{"playerId": "string", "playerName": "string", "jerseyNumber": 0, "position": "string", "totalDistance": 0, "averageSpeed": 0, "maxSpeed": 0,
                      "heatMapData": [{"x": 0-100, "y": 0-100, "intensity": 0-1, "timestamp": 0}],
                      "keyMoments": [{"timestamp": 0, "type": "string", "description": "string", "confidence": 0-1, "fieldPosition": "string", "outcome": "successful/failed"}]}],
  "tacticalAnalysis": {"formationChanges": [{"formation": "4-3-3", "timestamp": 0, "confidence": 0-1}],
                       "pressingMoments": [{"timestamp": 0, "duration": 0, "intensity": "high/medium/low", "playersInvolved": ["playerId"], "success": true}],
                       "buildUpPlay": [{"timestamp": 0, "duration": 0, "playersInvolved": ["playerId"], "passes": 0, "outcome": "successful/failed"}],
                       "defensiveActions": [{"timestamp": 0, "type": "tackle/interception/clearance/block", "playerId": "string", "success": true, "fieldPosition": "string"}],
                       "attackingPatterns": [{"timestamp": 0, "type": "string", "playersInvolved": ["playerId"], "outcome": "goal/shot/failed"}]},
  "matchStatistics": {"possession": {"home": 0-100, "away": 0-100}, "shots": {"home": 0, "away": 0},
                      "passes": {"home": 0, "away": 0, "accuracy": {"home": 0-100, "away": 0-100}},
                      "goals": [{"timestamp": 0, "playerId": "string", "team": "home/away", "type": "open-play/penalty/free-kick/header", "assistPlayerId": "string"}],
                      "cards": [{"timestamp": 0, "playerId": "string", "team": "home/away", "type": "yellow/red", "reason": "string"}],
                      "substitutions": [{"timestamp": 0, "playerOut": "string", "playerIn": "string", "team": "home/away", "reason": "tactical/injury/performance"}]},
  "insights": ["Critical insight 1", "Critical insight 2"],
  "recommendations": ["Immediate action 1", "Strategic recommendation 2"]
}"""

TRAINING_FORMAT = """{
  "summary": "Executive training session summary with critical observations",
  "sessionEffectiveness": 0-10,
  "skillDevelopment": [{
    "playerName": "string",
    "position": "string",
    "technicalSkills": {"ballControl": 0-10, "firstTouch": 0-10, "passing": 0-10, "improvement": -10 to +10},
    "physicalMetrics": {"speed": 0-10, "agility": 0-10, "endurance": 0-10, "improvement": -10 to +10},
    "tacticalUnderstanding": {"positioning": 0-10, "decisionMaking": 0-10, "communication": 0-10, "improvement": -10 to +10}
  }],
  "keyLearnings": [{"description": "string", "importance": "high/medium/low", "participants": ["player"]}],
  "insights": ["Critical training insight 1"],
  "recommendations": ["Immediate training adjustment 1"]
}"""

HIGHLIGHT_FORMAT = """{
  "summary": "Highlight reel analysis",
  "overallQuality": 0-10,
  "keyMoments": [{"timestamp": 0, "type": "string", "description": "string", "players": ["player"], "skillLevel": 0-10, "marketability": 0-10}],
  "insights": ["Highlight insight 1"],
  "recommendations": ["Content strategy recommendation 1"]
}"""

INTERVIEW_FORMAT = """{
  "summary": "Interview analysis",
  "communicationEffectiveness": 0-10,
  "keyQuotes": [{"quote": "string", "timestamp": 0, "speaker": "string", "context": "string", "importance": "high/medium/low", "sentiment": "positive/neutral/negative"}],
  "insights": ["Interview insight 1"],
  "recommendations": ["Media training recommendation 1"]
}"""

RESPONSE_FORMATS = {
    "match": MATCH_FORMAT,
    "training": TRAINING_FORMAT,
    "highlight": HIGHLIGHT_FORMAT,
    "interview": INTERVIEW_FORMAT,
}


class OpenAIAnalysisProvider(AnalysisProvider):
    """Video analysis through the OpenAI chat completions API with JSON output."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = self._initialize_client()

    def _initialize_client(self):
        """Initialize OpenAI client."""
        api_key = self.config.get("api_key")
        if not api_key:
            raise ConfigurationException("OpenAI API key is required (ANALYSIS_API_KEY)")
        try:
            return AsyncOpenAI(
                api_key=api_key,
                timeout=self.config.get("timeout", 600),
                max_retries=self.config.get("max_retries", 2),
            )
        except Exception as e:
            raise ProviderException(f"Failed to initialize OpenAI client: {e}")

    def build_prompt(self, video_url: str, video_type: str, sport: str, metadata: Dict[str, Any]) -> str:
        video_type = str(video_type)
        if video_type not in RESPONSE_FORMATS:
            raise ProviderException(f"Unsupported video type for analysis: {video_type}")

        duration = metadata.get("duration") or 0
        players = metadata.get("tagged_players") or []
        roster = ", ".join(
            f"{p.get('name')} (#{p.get('jersey_number')})" if p.get("jersey_number") is not None else str(p.get("name"))
            for p in players
        )
        lines = [
            f"You are an expert {sport} analyst. Analyze this {video_type} video (duration: {duration}s).",
            f"Video URL: {video_url}",
            f"Title: {metadata.get('title', '')}",
        ]
        if metadata.get("description"):
            lines.append(f"Description: {metadata['description']}")
        if metadata.get("match_details"):
            lines.append(f"Match details: {json.dumps(metadata['match_details'])}")
        if roster:
            lines.append(f"Tagged players: {roster}")
        lines.append("All timestamps are in seconds from the start of the video.")
        lines.append("Respond with JSON in exactly this format:")
        lines.append(RESPONSE_FORMATS[video_type])
        return "\n".join(lines)

    @handle_exceptions(retries=2, exceptions=(ProviderException,))
    @convert_exceptions({Exception: ProviderException})
    async def analyze(
        self,
        video_url: str,
        video_type: str,
        sport: str,
        metadata: Dict[str, Any],
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> Dict[str, Any]:
        prompt = self.build_prompt(video_url, video_type, sport, metadata)
        if on_progress:
            on_progress(0.0)

        started = time.monotonic()
        logger.info(f"Requesting {video_type} analysis for {video_url}")
        response = await self.client.chat.completions.create(
            model=self.config.get("model_name", "gpt-4o"),
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.config.get("temperature", 0.0),
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        try:
            result = json.loads(content)
        except json.JSONDecodeError as e:
            raise ProviderException(f"Analysis response was not valid JSON: {e}", details={"content": content[:500]})
        if not isinstance(result, dict):
            raise ProviderException("Analysis response was not a JSON object")

        result["processingTime"] = round(time.monotonic() - started, 3)
        logger.info(f"Analysis finished in {result['processingTime']}s")
        if on_progress:
            on_progress(100.0)
        return result

    async def close(self):
        """Close the OpenAI client and cleanup resources."""
        if self.client:
            logger.info("Closing OpenAI analysis client")
            await self.client.close()
