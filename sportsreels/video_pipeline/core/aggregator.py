"""
Fallback derivation of key moments and player actions from per-player tracking.

Some analysis payloads only surface events inside ``playerTracking``. When the
canonical list is empty, the embedded moments of every player are flattened,
sorted by timestamp and deduplicated on consecutive equal timestamps. A
non-empty canonical list is always returned unchanged.
"""

from typing import Callable, List, Sequence, Tuple, TypeVar

from .models import AnalysisData, KeyMoment, PlayerAction, PlayerTracking, TrackedMoment

T = TypeVar("T")


def flatten_tracked_moments(tracking: Sequence[PlayerTracking]) -> List[Tuple[PlayerTracking, TrackedMoment]]:
    return [(player, moment) for player in tracking for moment in player.key_moments]


def sort_and_dedupe(items: Sequence[T], key: Callable[[T], float] = lambda item: item.timestamp) -> List[T]:
    """
    Stable-sort ascending by timestamp and drop consecutive entries sharing a
    timestamp, keeping the first occurrence.
    """
    result: List[T] = []
    for item in sorted(items, key=key):
        if result and key(result[-1]) == key(item):
            continue
        result.append(item)
    return result


def _participants(player: PlayerTracking) -> List[str]:
    return [player.player_name] if player.player_name else []


def _to_key_moment(player: PlayerTracking, moment: TrackedMoment) -> KeyMoment:
    return KeyMoment(
        timestamp=moment.timestamp,
        type=moment.type,
        description=moment.description,
        importance="high" if moment.confidence >= 0.8 else "medium",
        context=moment.outcome,
        participants=_participants(player),
    )


def _to_player_action(player: PlayerTracking, moment: TrackedMoment) -> PlayerAction:
    return PlayerAction(
        timestamp=moment.timestamp,
        action=moment.type,
        description=moment.description,
        confidence=moment.confidence,
        players=_participants(player),
        zone=moment.field_position,
        outcome=moment.outcome,
    )


def aggregate_key_moments(data: AnalysisData) -> List[KeyMoment]:
    if data.key_moments:
        return list(data.key_moments)
    pairs = sort_and_dedupe(flatten_tracked_moments(data.player_tracking), key=lambda pair: pair[1].timestamp)
    return [_to_key_moment(player, moment) for player, moment in pairs]


def aggregate_player_actions(data: AnalysisData) -> List[PlayerAction]:
    if data.player_actions:
        return list(data.player_actions)
    pairs = sort_and_dedupe(flatten_tracked_moments(data.player_tracking), key=lambda pair: pair[1].timestamp)
    return [_to_player_action(player, moment) for player, moment in pairs]


def with_aggregated_lists(data: AnalysisData) -> AnalysisData:
    """A copy of ``data`` whose empty action/moment lists are filled from tracking."""
    if data.key_moments and data.player_actions:
        return data
    return data.model_copy(update={
        "key_moments": aggregate_key_moments(data),
        "player_actions": aggregate_player_actions(data),
    })
