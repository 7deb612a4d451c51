import pytest

from sportsreels.video_pipeline.core.models import Sport
from sportsreels.video_pipeline.core.sport_classifier import (
    classify_sport,
    detect_sport_from_content,
    normalize_sport_name,
    resolve_sport,
)


@pytest.mark.parametrize("name, expected", [
    ("Soccer", Sport.FOOTBALL),
    ("ice hockey", Sport.HOCKEY),
    ("Track and Field", Sport.ATHLETICS),
    ("BASKETBALL", Sport.BASKETBALL),
    ("rugby_league", Sport.RUGBY),
    ("quidditch", None),
    ("", None),
    (None, None),
])
def test_normalize_sport_name(name, expected):
    assert normalize_sport_name(name) == expected


def test_team_sport_wins_over_content():
    assert classify_sport("rugby", title="Basketball skills night") == Sport.RUGBY


def test_content_keywords_when_team_has_no_sport():
    assert classify_sport(None, title="Slam dunk compilation") == Sport.BASKETBALL
    assert classify_sport(None, description="Bowler takes a wicket in the final over") == Sport.CRICKET
    assert classify_sport(None, tags=["scrum", "lineout"]) == Sport.RUGBY


def test_unknown_team_sport_falls_back_to_content():
    assert classify_sport("quidditch", title="Wimbledon practice") == Sport.TENNIS


def test_default_is_football():
    assert classify_sport(None, title="Saturday morning") == Sport.FOOTBALL
    assert classify_sport() == Sport.FOOTBALL


def test_first_matching_rule_wins():
    # basketball is checked before football
    assert detect_sport_from_content(title="NBA star scores a goal at charity football game") == Sport.BASKETBALL


def test_keywords_match_whole_words():
    assert detect_sport_from_content(title="Goalkeeper reflexes") is None


async def test_resolve_sport_uses_team_lookup():
    async def lookup():
        return "volleyball"

    assert await resolve_sport(lookup, title="Derby Match") == Sport.VOLLEYBALL


async def test_resolve_sport_survives_failing_lookup():
    async def lookup():
        raise ConnectionError("teams table unavailable")

    assert await resolve_sport(lookup, title="Golf day", tags=["birdie"]) == Sport.GOLF


def test_classification_is_deterministic():
    args = dict(title="Rugby sevens with a basketball warm-up", tags=["tennis"])
    assert {classify_sport(None, **args) for _ in range(20)} == {Sport.BASKETBALL}
