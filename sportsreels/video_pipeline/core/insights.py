"""
Sport-specific insights and recommendations derived from tracking and tactical data.

Used by the normalizer when an analysis payload carries per-player tracking or
tactical events but no ready-made insight block.
"""

from typing import List, Optional

from .models import (
    CriticalMoment,
    Importance,
    MatchStatistics,
    PerformanceMetrics,
    PlayerRating,
    PlayerTracking,
    SportSpecificInsights,
    TacticalAnalysis,
)

HIGH_PRESSING = "High Pressing"
POSSESSION_BASED = "Possession Based"
BALANCED = "Balanced"


def _round1(value: float) -> float:
    return round(value * 10) / 10


def _bounded(value: float, low: float = 1.0, high: float = 10.0) -> float:
    return min(high, max(low, value))


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _success_rate(successes: int, total: int) -> float:
    return successes / total if total else 0.5


def tactical_style(tactical: TacticalAnalysis) -> str:
    pressing = len(tactical.pressing_moments)
    build_up = len(tactical.build_up_play)
    if pressing > build_up * 1.5:
        return HIGH_PRESSING
    if build_up > pressing * 1.5:
        return POSSESSION_BASED
    return BALANCED


def key_strengths(tactical: TacticalAnalysis, stats: Optional[MatchStatistics]) -> List[str]:
    strengths = []
    if stats is not None and stats.passes.accuracy.home > 85:
        strengths.append("High passing accuracy and ball retention")

    defensive = tactical.defensive_actions
    if defensive and sum(1 for a in defensive if a.success) > len(defensive) * 0.7:
        strengths.append("Strong defensive performance and tackling")

    if any(m.intensity == "high" for m in tactical.pressing_moments):
        strengths.append("Effective high-intensity pressing")

    build_up = tactical.build_up_play
    if build_up and sum(1 for p in build_up if p.outcome == "successful") > len(build_up) * 0.6:
        strengths.append("Effective build-up play and ball progression")

    return strengths or ["Consistent team performance"]


def areas_for_improvement(tactical: TacticalAnalysis, stats: Optional[MatchStatistics]) -> List[str]:
    improvements = []
    if stats is not None and stats.passes.accuracy.home < 75:
        improvements.append("Improve passing accuracy and ball retention")

    defensive = tactical.defensive_actions
    if defensive and sum(1 for a in defensive if not a.success) > len(defensive) * 0.4:
        improvements.append("Reduce defensive errors and improve tackling success rate")

    attacks = tactical.attacking_patterns
    if attacks and sum(1 for a in attacks if a.outcome == "failed") > len(attacks) * 0.5:
        improvements.append("Improve attacking efficiency and final third execution")

    pressing = tactical.pressing_moments
    if pressing and sum(1 for m in pressing if not m.success) > len(pressing) * 0.4:
        improvements.append("Improve pressing coordination and timing")

    return improvements or ["Continue current development and training"]


def critical_moments(tactical: TacticalAnalysis, stats: Optional[MatchStatistics]) -> List[CriticalMoment]:
    moments = []
    if stats is not None:
        for goal in stats.goals:
            moments.append(CriticalMoment(
                timestamp=goal.timestamp,
                type="goal",
                description=f"{goal.type} goal scored",
                importance=Importance.CRITICAL,
                players_involved=[p for p in (goal.player_id, goal.assist_player_id) if p],
                outcome="Goal scored",
            ))

    for change in tactical.formation_changes:
        moments.append(CriticalMoment(
            timestamp=change.timestamp,
            type="formation-change",
            description=f"Formation changed to {change.formation}",
            importance=Importance.HIGH,
            players_involved=[p.player_id for p in change.positions if p.player_id],
            outcome="Tactical adjustment",
        ))

    for pressing in tactical.pressing_moments:
        if pressing.intensity == "high" and pressing.success:
            moments.append(CriticalMoment(
                timestamp=pressing.timestamp,
                type="tactical-shift",
                description="High-intensity pressing triggered",
                importance=Importance.HIGH,
                players_involved=list(pressing.players_involved),
                outcome="Successful pressing",
            ))

    return sorted(moments, key=lambda m: m.timestamp)


def player_influence(player: PlayerTracking, tactical: TacticalAnalysis) -> float:
    influence = len(player.key_moments) * 0.3
    influence += sum(1 for m in tactical.pressing_moments if player.player_id in m.players_involved) * 0.2
    influence += sum(1 for p in tactical.build_up_play if player.player_id in p.players_involved) * 0.2
    influence += sum(1 for a in tactical.attacking_patterns if player.player_id in a.players_involved) * 0.3
    return min(10.0, influence)


def tactical_effectiveness(tactical: TacticalAnalysis) -> float:
    pressing = tactical.pressing_moments
    build_up = tactical.build_up_play
    defensive = tactical.defensive_actions
    attacks = tactical.attacking_patterns

    effectiveness = _success_rate(sum(1 for m in pressing if m.success), len(pressing)) * 0.3
    effectiveness += _success_rate(sum(1 for p in build_up if p.outcome == "successful"), len(build_up)) * 0.3
    effectiveness += _success_rate(sum(1 for d in defensive if d.success), len(defensive)) * 0.2
    effectiveness += _success_rate(sum(1 for a in attacks if a.outcome in ("goal", "shot")), len(attacks)) * 0.2
    return effectiveness * 10


def rate_player(player: PlayerTracking, tactical: TacticalAnalysis) -> PlayerRating:
    key_actions = len(player.key_moments)
    influence = player_influence(player, tactical)
    successful = sum(1 for m in player.key_moments if m.outcome == "successful")

    technical = _bounded(key_actions * 0.5 + (player.total_distance / 1000) * 0.3 + influence * 0.2)
    tactical_rating = _bounded(influence * 0.6 + (successful / max(1, key_actions)) * 0.4)
    physical = _bounded(
        (player.total_distance / 1000) * 0.4 + (player.max_speed / 10) * 0.3 + (player.average_speed / 5) * 0.3
    )
    overall = (technical + tactical_rating + physical) / 3

    return PlayerRating(
        player_id=player.player_id,
        player_name=player.player_name,
        overall_rating=_round1(overall),
        technical_rating=_round1(technical),
        tactical_rating=_round1(tactical_rating),
        physical_rating=_round1(physical),
        key_actions=key_actions,
        influence=_round1(influence),
    )


def performance_metrics(tracking: List[PlayerTracking], tactical: TacticalAnalysis) -> PerformanceMetrics:
    ratings = [rate_player(p, tactical) for p in tracking]
    return PerformanceMetrics(
        overall_team_rating=_round1(_mean([r.overall_rating for r in ratings])),
        individual_ratings=ratings,
        tactical_effectiveness=_round1(tactical_effectiveness(tactical)),
        physical_performance=_round1(_mean([r.physical_rating for r in ratings])),
        technical_execution=_round1(_mean([r.technical_rating for r in ratings])),
    )


def derive_sport_specific_insights(
    tracking: List[PlayerTracking],
    tactical: TacticalAnalysis,
    stats: Optional[MatchStatistics] = None,
) -> Optional[SportSpecificInsights]:
    """Build insights from tracking/tactical data, or None when there is nothing to work with."""
    if not tracking and tactical.is_empty() and stats is None:
        return None

    formations = tactical.formation_changes
    return SportSpecificInsights(
        formation=formations[0].formation if formations else "Unknown",
        tactical_style=tactical_style(tactical),
        key_strengths=key_strengths(tactical, stats),
        areas_for_improvement=areas_for_improvement(tactical, stats),
        critical_moments=critical_moments(tactical, stats),
        performance_metrics=performance_metrics(tracking, tactical),
    )


def derive_recommendations(insights: SportSpecificInsights) -> List[str]:
    """Coaching recommendations that follow from derived insights."""
    recommendations = []
    metrics = insights.performance_metrics

    if insights.tactical_style == HIGH_PRESSING:
        recommendations.append("Consider varying pressing intensity to maintain energy levels throughout the match")

    if "Improve passing accuracy and ball retention" in insights.areas_for_improvement:
        recommendations.append("Focus on passing drills and first touch training to improve ball retention")

    low_rated = [r.player_name for r in metrics.individual_ratings if r.overall_rating < 6]
    if low_rated:
        recommendations.append(
            f"Provide additional coaching support for {', '.join(low_rated)} to improve overall performance"
        )

    if insights.formation in ("Unknown", "Unclear"):
        recommendations.append("Work on clearer formation structure and player positioning during training")

    if metrics.individual_ratings:
        if metrics.physical_performance < 7:
            recommendations.append("Increase focus on physical conditioning and endurance training")
        if metrics.technical_execution < 7:
            recommendations.append("Implement more technical skill drills and ball work in training sessions")

    if metrics.tactical_effectiveness < 7:
        recommendations.append("Review tactical implementation and team coordination during match situations")

    return recommendations
