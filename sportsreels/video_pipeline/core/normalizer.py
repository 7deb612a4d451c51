"""
Normalization of raw, video-type-shaped AI responses into canonical AnalysisData.

The analysis service returns a different schema for each video type, so each
type has its own extraction branch selected by the declared ``VideoType``:

- match: player actions and key moments come straight from the event lists;
  player stats and the per-minute timeline are copied with light renaming.
- training: per-player technical/physical/tactical ratings are averaged, and
  key learnings become key moments spaced a fixed interval apart.
- highlight: every highlighted moment is both a PlayerAction and a KeyMoment,
  with importance derived from its skill level.
- interview: every quote is a "Quote" action spoken by its speaker, with
  confidence derived from the quote's importance label.

``normalize`` is a pure function of its inputs.
"""

import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from .insights import derive_recommendations, derive_sport_specific_insights
from .models import (
    AnalysisData,
    Importance,
    KeyMoment,
    MatchStatistics,
    PlayerAction,
    PlayerStat,
    PlayerTracking,
    Sport,
    SportSpecificInsights,
    TacticalAnalysis,
    TimelineBucket,
    VideoType,
    clamp_timestamp,
)

M = TypeVar("M", bound=BaseModel)

DEFAULT_SUMMARY = "Analysis completed. A detailed summary was not provided for this video."
DEFAULT_RECOMMENDATIONS = ["Review the video with the coaching staff to agree on development priorities."]
DEFAULT_TRAINING_INTERVAL = 30
HIGHLIGHT_HIGH_SKILL = 8
QUOTE_CONFIDENCE = {"high": 0.9, "medium": 0.7, "low": 0.5}
DEFAULT_ACTION_CONFIDENCE = 0.8

_RATING_KEYS = {
    VideoType.MATCH: ("performanceRating", "overallRating", "teamRating"),
    VideoType.TRAINING: ("performanceRating", "sessionEffectiveness"),
    VideoType.HIGHLIGHT: ("performanceRating", "overallQuality"),
    VideoType.INTERVIEW: ("performanceRating", "communicationEffectiveness"),
}


def _pick(source: Dict, *keys: str, default: Any = None) -> Any:
    """First present, non-None value among several candidate keys."""
    if not isinstance(source, dict):
        return default
    for key in keys:
        value = source.get(key)
        if value is not None:
            return value
    return default


def _as_list(value: Any) -> List:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def _as_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _count(value: Any) -> Optional[int]:
    number = _as_float(value)
    if number is None or not math.isfinite(number):
        return None
    return int(number)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _strings(values: Iterable) -> List[str]:
    return [str(v) for v in _as_list(values) if v is not None and str(v).strip()]


def _names(item: Dict, *keys: str) -> List[str]:
    value = _pick(item, *keys)
    return _strings(value)


def _score(value: Any) -> Optional[float]:
    """A single 0-10 rating: a number, or the mean of a dict of sub-scores."""
    if isinstance(value, dict):
        numbers = [
            _as_float(v) for k, v in value.items()
            if k != "improvement" and _as_float(v) is not None
        ]
        return sum(numbers) / len(numbers) if numbers else None
    return _as_float(value)


def _parse_many(model: Type[M], items: Any) -> List[M]:
    parsed = []
    for item in _as_list(items):
        if not isinstance(item, dict):
            continue
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping malformed {model.__name__} entry: {e.error_count()} error(s)")
    return parsed


def _parse_one(model: Type[M], item: Any) -> Optional[M]:
    if not isinstance(item, dict):
        return None
    try:
        return model.model_validate(item)
    except ValidationError as e:
        logger.debug(f"Ignoring malformed {model.__name__}: {e.error_count()} error(s)")
        return None


class AnalysisNormalizer:
    """Maps raw analysis responses onto the canonical AnalysisData schema."""

    def __init__(self, training_moment_interval: float = DEFAULT_TRAINING_INTERVAL):
        self.training_moment_interval = training_moment_interval
        self._branches: Dict[VideoType, Callable[[Dict], Dict[str, Any]]] = {
            VideoType.MATCH: self._normalize_match,
            VideoType.TRAINING: self._normalize_training,
            VideoType.HIGHLIGHT: self._normalize_highlight,
            VideoType.INTERVIEW: self._normalize_interview,
        }

    def normalize(
        self,
        video_type: VideoType,
        raw: Optional[Dict],
        sport: Sport = Sport.FOOTBALL,
        duration: Optional[float] = None,
    ) -> AnalysisData:
        video_type = VideoType(video_type)
        raw = self._unwrap(raw)

        fields = self._branches[video_type](raw)
        fields.update(self._common_fields(video_type, raw))

        data = AnalysisData(video_type=video_type, sport=Sport(sport), **fields)
        return self._clamp_timestamps(data, duration)

    __call__ = normalize

    @staticmethod
    def _unwrap(raw: Optional[Dict]) -> Dict:
        if not isinstance(raw, dict):
            return {}
        nested = raw.get("analysis")
        if isinstance(nested, dict):
            return nested
        return raw

    # ------------------------------------------------------------------
    # Shared fields
    # ------------------------------------------------------------------
    def _common_fields(self, video_type: VideoType, raw: Dict) -> Dict[str, Any]:
        tracking = _parse_many(PlayerTracking, _pick(raw, "playerTracking", "player_tracking"))
        tactical = _parse_one(TacticalAnalysis, _pick(raw, "tacticalAnalysis", "tactical_analysis")) or TacticalAnalysis()
        stats = _parse_one(MatchStatistics, _pick(raw, "matchStatistics", "match_statistics"))

        insights_block = _parse_one(SportSpecificInsights, _pick(raw, "sportSpecificInsights", "sport_specific_insights"))
        if insights_block is None:
            insights_block = derive_sport_specific_insights(tracking, tactical, stats)

        recommendations = _strings(_pick(raw, "recommendations"))
        if not recommendations and insights_block is not None:
            recommendations = derive_recommendations(insights_block)
        if not recommendations:
            recommendations = list(DEFAULT_RECOMMENDATIONS)

        summary = _pick(raw, "summary")
        summary = summary.strip() if isinstance(summary, str) else ""

        rating = _score(_pick(raw, *_RATING_KEYS[video_type]))
        confidence = _as_float(_pick(raw, "confidence"))
        processing_time = _as_float(_pick(raw, "processingTime", "processing_time"))

        return {
            "summary": summary or DEFAULT_SUMMARY,
            "insights": _strings(_pick(raw, "insights")),
            "performance_rating": min(10.0, max(0.0, rating or 0.0)),
            "player_tracking": tracking,
            "tactical_analysis": tactical,
            "match_statistics": stats,
            "sport_specific_insights": insights_block,
            "recommendations": recommendations,
            "confidence": None if confidence is None else min(1.0, max(0.0, confidence)),
            "processing_time": processing_time,
        }

    # ------------------------------------------------------------------
    # Per-type branches
    # ------------------------------------------------------------------
    def _normalize_match(self, raw: Dict) -> Dict[str, Any]:
        actions = []
        for item in _as_list(_pick(raw, "playerActions", "matchEvents", "events")):
            if not isinstance(item, dict):
                continue
            label = _pick(item, "action", "type")
            if not label:
                continue
            details = _pick(item, "description", "details", default="")
            actions.append(PlayerAction(
                timestamp=clamp_timestamp(_as_float(_pick(item, "timestamp", "time"), 0.0), None),
                action=str(label),
                description=details if isinstance(details, str) else str(details),
                confidence=_pick(item, "confidence", default=DEFAULT_ACTION_CONFIDENCE),
                players=_names(item, "players", "participants", "playerName", "player", "playerId"),
                zone=str(_pick(item, "zone", "fieldPosition", default="")),
                outcome=_optional_str(_pick(item, "outcome", "impact")),
            ))

        return {
            "player_actions": actions,
            "key_moments": self._key_moments(_pick(raw, "keyMoments")),
            "player_stats": self._player_stats(_pick(raw, "playerStats", "advancedPlayerMetrics", "playerPerformance")),
            "timeline": self._timeline(_pick(raw, "timeline")),
        }

    def _normalize_training(self, raw: Dict) -> Dict[str, Any]:
        stats = []
        for item in _as_list(_pick(raw, "skillDevelopment", "playerRatings", "players")):
            if not isinstance(item, dict):
                continue
            name = _pick(item, "playerName", "name")
            if not name:
                continue
            ratings = _pick(item, "skillRatings", "ratings", default=item)
            components = [
                _score(_pick(ratings, "technical", "technicalSkills")),
                _score(_pick(ratings, "physical", "physicalMetrics")),
                _score(_pick(ratings, "tactical", "tacticalUnderstanding")),
            ]
            components = [c for c in components if c is not None]
            stats.append(PlayerStat(
                name=str(name),
                position=str(_pick(item, "position", default="")),
                rating=sum(components) / len(components) if components else 0.0,
            ))

        moments = []
        for index, learning in enumerate(_as_list(_pick(raw, "keyLearnings", "learnings"))):
            if isinstance(learning, dict):
                text = _pick(learning, "description", "learning", "title", default="")
                importance = _pick(learning, "importance", default=Importance.MEDIUM.value)
                participants = _names(learning, "participants", "players", "playerName")
            else:
                text, importance, participants = learning, Importance.MEDIUM.value, []
            if not text:
                continue
            moments.append(KeyMoment(
                timestamp=index * self.training_moment_interval,
                type="learning",
                description=str(text),
                importance=importance,
                participants=participants,
            ))

        return {
            "player_actions": [],
            "key_moments": moments,
            "player_stats": stats,
            "timeline": [],
        }

    def _normalize_highlight(self, raw: Dict) -> Dict[str, Any]:
        actions, moments = [], []
        for item in _as_list(_pick(raw, "keyMoments", "highlights", "skillShowcase")):
            if not isinstance(item, dict):
                continue
            label = str(_pick(item, "type", "skill", default="Highlight"))
            description = str(_pick(item, "description", default=""))
            timestamp = clamp_timestamp(_as_float(_pick(item, "timestamp"), 0.0), None)
            players = _names(item, "players", "participants", "player", "playerName")
            skill_level = _as_float(_pick(item, "skillLevel", "difficulty", "execution"))

            if skill_level is None:
                confidence, importance = 0.5, Importance.MEDIUM
            else:
                confidence = skill_level / 10
                importance = Importance.HIGH if skill_level >= HIGHLIGHT_HIGH_SKILL else Importance.MEDIUM

            actions.append(PlayerAction(
                timestamp=timestamp,
                action=label,
                description=description,
                confidence=confidence,
                players=players,
            ))
            moments.append(KeyMoment(
                timestamp=timestamp,
                type=label,
                description=description,
                importance=importance,
                participants=players,
            ))

        return {"player_actions": actions, "key_moments": moments, "player_stats": [], "timeline": []}

    def _normalize_interview(self, raw: Dict) -> Dict[str, Any]:
        actions, moments = [], []
        for item in _as_list(_pick(raw, "keyQuotes", "quotes")):
            if not isinstance(item, dict):
                continue
            quote = _pick(item, "quote", "text")
            if not quote:
                continue
            label = str(_pick(item, "importance", default="medium")).lower()
            speaker = _pick(item, "speaker")
            participants = [str(speaker)] if speaker else []
            timestamp = clamp_timestamp(_as_float(_pick(item, "timestamp"), 0.0), None)

            actions.append(PlayerAction(
                timestamp=timestamp,
                action="Quote",
                description=str(quote),
                confidence=QUOTE_CONFIDENCE.get(label, QUOTE_CONFIDENCE["medium"]),
                players=participants,
            ))
            moments.append(KeyMoment(
                timestamp=timestamp,
                type="quote",
                description=str(quote),
                importance=label,
                context=_pick(item, "context"),
                participants=participants,
            ))

        return {"player_actions": actions, "key_moments": moments, "player_stats": [], "timeline": []}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _key_moments(items: Any) -> List[KeyMoment]:
        moments = []
        for item in _as_list(items):
            if not isinstance(item, dict) or not _pick(item, "type"):
                continue
            context = _pick(item, "context", "quote")
            moments.append(KeyMoment(
                timestamp=clamp_timestamp(_as_float(_pick(item, "timestamp"), 0.0), None),
                type=str(_pick(item, "type")),
                description=str(_pick(item, "description", default="")),
                importance=_pick(item, "importance", default=Importance.MEDIUM.value),
                context=str(context) if context is not None else None,
                participants=_names(item, "participants", "players", "playersInvolved"),
            ))
        return moments

    @staticmethod
    def _player_stats(items: Any) -> List[PlayerStat]:
        stats = []
        for item in _as_list(items):
            if not isinstance(item, dict):
                continue
            name = _pick(item, "name", "playerName")
            if not name:
                continue
            rating = _score(_pick(item, "rating", "overallRating"))
            if rating is None and isinstance(item.get("performance"), dict):
                rating = _as_float(item["performance"].get("overall"))
            raw_actions = _pick(item, "actions", "actionCounts", default={})
            actions = {}
            if isinstance(raw_actions, dict):
                actions = {
                    str(k): _count(v) for k, v in raw_actions.items()
                    if _count(v) is not None
                }
            stats.append(PlayerStat(
                name=str(name),
                position=str(_pick(item, "position", default="")),
                rating=min(10.0, max(0.0, rating or 0.0)),
                actions=actions,
            ))
        return stats

    @staticmethod
    def _timeline(items: Any) -> List[TimelineBucket]:
        buckets = []
        for item in _as_list(items):
            if not isinstance(item, dict):
                continue
            minute = _as_float(_pick(item, "minute"))
            timestamp = _as_float(_pick(item, "timestamp"))
            if timestamp is None:
                timestamp = minute * 60 if minute is not None else 0.0
            buckets.append(TimelineBucket(
                timestamp=clamp_timestamp(timestamp, None),
                minute=int(minute) if minute is not None else None,
                label=str(_pick(item, "label", "event", "description", default="")),
                events=_strings(_pick(item, "events")),
            ))
        return buckets

    @staticmethod
    def _clamp_timestamps(data: AnalysisData, duration: Optional[float]) -> AnalysisData:
        if duration is None or duration <= 0:
            return data

        def clamp(items):
            return [i.model_copy(update={"timestamp": clamp_timestamp(i.timestamp, duration)}) for i in items]

        return data.model_copy(update={
            "player_actions": clamp(data.player_actions),
            "key_moments": clamp(data.key_moments),
            "timeline": clamp(data.timeline),
            "player_tracking": [
                p.model_copy(update={"key_moments": clamp(p.key_moments)}) for p in data.player_tracking
            ],
        })


_default_normalizer = AnalysisNormalizer()


def normalize_analysis(
    video_type: VideoType,
    raw: Optional[Dict],
    sport: Sport = Sport.FOOTBALL,
    duration: Optional[float] = None,
) -> AnalysisData:
    """Normalize with the default training interval."""
    return _default_normalizer.normalize(video_type, raw, sport=sport, duration=duration)
