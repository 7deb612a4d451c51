from sportsreels.video_pipeline.core.aggregator import (
    aggregate_key_moments,
    aggregate_player_actions,
    sort_and_dedupe,
    with_aggregated_lists,
)
from sportsreels.video_pipeline.core.models import (
    AnalysisData,
    Importance,
    KeyMoment,
    PlayerAction,
    PlayerTracking,
    TrackedMoment,
    VideoType,
)


def _tracking():
    return [
        PlayerTracking(player_id="p7", player_name="Sean Murphy", key_moments=[
            TrackedMoment(timestamp=30, type="shot", description="Low drive", confidence=0.9, outcome="saved"),
            TrackedMoment(timestamp=10, type="dribble", description="Beat two defenders", confidence=0.6),
        ]),
        PlayerTracking(player_id="p4", player_name="Ciaran Walsh", key_moments=[
            TrackedMoment(timestamp=30, type="block", description="Blocked the rebound", confidence=0.7),
        ]),
    ]


def test_sort_and_dedupe_drops_repeated_timestamps():
    moments = [
        KeyMoment(timestamp=30, type="first"),
        KeyMoment(timestamp=30, type="second"),
        KeyMoment(timestamp=10, type="early"),
    ]

    result = sort_and_dedupe(moments)

    assert [m.timestamp for m in result] == [10.0, 30.0]
    assert result[1].type == "first"


def test_sort_and_dedupe_keeps_distinct_timestamps():
    moments = [KeyMoment(timestamp=t, type="x") for t in (5, 1, 3)]
    assert [m.timestamp for m in sort_and_dedupe(moments)] == [1.0, 3.0, 5.0]


def test_moments_are_derived_from_tracking_when_empty():
    data = AnalysisData(video_type=VideoType.MATCH, player_tracking=_tracking())

    moments = aggregate_key_moments(data)

    assert [m.timestamp for m in moments] == [10.0, 30.0]
    assert moments[0].participants == ["Sean Murphy"]
    assert moments[0].importance == Importance.MEDIUM
    assert moments[1].type == "shot"
    assert moments[1].importance == Importance.HIGH
    assert moments[1].context == "saved"


def test_actions_are_derived_from_tracking_when_empty():
    data = AnalysisData(video_type=VideoType.MATCH, player_tracking=_tracking())

    actions = aggregate_player_actions(data)

    assert [a.action for a in actions] == ["dribble", "shot"]
    assert actions[1].players == ["Sean Murphy"]
    assert actions[1].confidence == 0.9


def test_non_empty_lists_are_returned_unchanged():
    moments = [KeyMoment(timestamp=50, type="goal"), KeyMoment(timestamp=50, type="celebration")]
    actions = [PlayerAction(timestamp=90, action="pass"), PlayerAction(timestamp=20, action="shot")]
    data = AnalysisData(video_type=VideoType.MATCH, key_moments=moments, player_actions=actions,
                        player_tracking=_tracking())

    assert aggregate_key_moments(data) == moments
    assert aggregate_player_actions(data) == actions


def test_with_aggregated_lists_fills_only_empty_lists():
    actions = [PlayerAction(timestamp=90, action="pass")]
    data = AnalysisData(video_type=VideoType.MATCH, player_actions=actions, player_tracking=_tracking())

    filled = with_aggregated_lists(data)

    assert filled.player_actions == actions
    assert len(filled.key_moments) == 2
    assert data.key_moments == []


def test_nothing_to_aggregate():
    data = AnalysisData(video_type=VideoType.INTERVIEW)
    assert aggregate_key_moments(data) == []
    assert aggregate_player_actions(data) == []
