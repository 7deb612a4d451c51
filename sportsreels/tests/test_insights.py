import pytest

from sportsreels.video_pipeline.core import insights
from sportsreels.video_pipeline.core.models import (
    Importance,
    MatchStatistics,
    PlayerTracking,
    TacticalAnalysis,
    TrackedMoment,
)


def _tactical(**overrides):
    return TacticalAnalysis.model_validate(overrides)


def test_tactical_style():
    pressing = [{"timestamp": t} for t in range(4)]
    build_up = [{"timestamp": t} for t in range(2)]

    assert insights.tactical_style(_tactical(pressingMoments=pressing, buildUpPlay=build_up)) == insights.HIGH_PRESSING
    assert insights.tactical_style(_tactical(pressingMoments=build_up, buildUpPlay=pressing)) == insights.POSSESSION_BASED
    assert insights.tactical_style(TacticalAnalysis()) == insights.BALANCED


def test_strengths_and_improvements_have_fallbacks():
    assert insights.key_strengths(TacticalAnalysis(), None) == ["Consistent team performance"]
    assert insights.areas_for_improvement(TacticalAnalysis(), None) == ["Continue current development and training"]


def test_passing_accuracy_drives_strengths_and_improvements():
    accurate = MatchStatistics.model_validate({"passes": {"accuracy": {"home": 90}}})
    sloppy = MatchStatistics.model_validate({"passes": {"accuracy": {"home": 60}}})

    assert "High passing accuracy and ball retention" in insights.key_strengths(TacticalAnalysis(), accurate)
    assert "Improve passing accuracy and ball retention" in insights.areas_for_improvement(TacticalAnalysis(), sloppy)


def test_critical_moments_are_sorted_and_typed():
    stats = MatchStatistics.model_validate({"goals": [{"timestamp": 900, "playerId": "p7", "type": "header"}]})
    tactical = _tactical(
        formationChanges=[{"formation": "3-5-2", "timestamp": 1800, "positions": [{"playerId": "p4"}]}],
        pressingMoments=[{"timestamp": 300, "intensity": "high", "success": True, "playersInvolved": ["p7"]},
                         {"timestamp": 400, "intensity": "low", "success": True}],
    )

    moments = insights.critical_moments(tactical, stats)

    assert [m.type for m in moments] == ["tactical-shift", "goal", "formation-change"]
    assert moments[1].importance == Importance.CRITICAL
    assert moments[1].players_involved == ["p7"]
    assert moments[2].players_involved == ["p4"]


def test_player_rating_is_bounded():
    player = PlayerTracking(player_name="Sean Murphy", total_distance=0, key_moments=[])

    rating = insights.rate_player(player, TacticalAnalysis())

    assert rating.technical_rating == 1.0
    assert rating.physical_rating == 1.0
    assert 1.0 <= rating.overall_rating <= 10.0


def test_tactical_effectiveness_defaults_to_half():
    assert insights.tactical_effectiveness(TacticalAnalysis()) == pytest.approx(5.0)


def test_no_data_means_no_insights():
    assert insights.derive_sport_specific_insights([], TacticalAnalysis(), None) is None


def test_recommendations_follow_from_insights():
    player = PlayerTracking(player_id="p4", player_name="Ciaran Walsh", total_distance=2000,
                            key_moments=[TrackedMoment(timestamp=10, type="tackle")])

    derived = insights.derive_sport_specific_insights([player], TacticalAnalysis())
    recommendations = insights.derive_recommendations(derived)

    assert derived.formation == "Unknown"
    assert any("Ciaran Walsh" in r for r in recommendations)
    assert "Work on clearer formation structure and player positioning during training" in recommendations
    assert "Review tactical implementation and team coordination during match situations" in recommendations
