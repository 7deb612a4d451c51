"""
Rule-based sport detection for uploaded videos.

A team's declared sport is authoritative. Without one, the title, description
and tags are scanned against an ordered list of keyword rules; the first rule
that matches wins, and football is the default.
"""

import re
from typing import Awaitable, Callable, Iterable, Optional, Tuple

from loguru import logger

from .models import Sport

DEFAULT_SPORT = Sport.FOOTBALL

SPORT_SYNONYMS = {
    "soccer": Sport.FOOTBALL,
    "association football": Sport.FOOTBALL,
    "futbol": Sport.FOOTBALL,
    "football": Sport.FOOTBALL,
    "basketball": Sport.BASKETBALL,
    "hoops": Sport.BASKETBALL,
    "rugby": Sport.RUGBY,
    "rugby union": Sport.RUGBY,
    "rugby league": Sport.RUGBY,
    "tennis": Sport.TENNIS,
    "volleyball": Sport.VOLLEYBALL,
    "beach volleyball": Sport.VOLLEYBALL,
    "baseball": Sport.BASEBALL,
    "softball": Sport.BASEBALL,
    "cricket": Sport.CRICKET,
    "hockey": Sport.HOCKEY,
    "ice hockey": Sport.HOCKEY,
    "field hockey": Sport.HOCKEY,
    "golf": Sport.GOLF,
    "swimming": Sport.SWIMMING,
    "athletics": Sport.ATHLETICS,
    "track and field": Sport.ATHLETICS,
    "track & field": Sport.ATHLETICS,
}

# Order matters: the first sport with a matching keyword wins.
SPORT_KEYWORD_RULES: Tuple[Tuple[Sport, Tuple[str, ...]], ...] = (
    (Sport.BASKETBALL, ("basketball", "nba", "dunk", "three-pointer", "3-pointer", "layup", "free throw", "slam dunk")),
    (Sport.RUGBY, ("rugby", "scrum", "try line", "lineout", "ruck", "maul", "conversion kick")),
    (Sport.TENNIS, ("tennis", "wimbledon", "backhand", "forehand", "deuce", "volley")),
    (Sport.VOLLEYBALL, ("volleyball", "spike", "set point", "libero")),
    (Sport.BASEBALL, ("baseball", "home run", "pitcher", "inning", "strikeout", "batter")),
    (Sport.CRICKET, ("cricket", "wicket", "bowler", "batsman", "innings", "lbw", "test match")),
    (Sport.HOCKEY, ("hockey", "puck", "nhl", "power play", "stick handling", "face-off", "faceoff")),
    (Sport.GOLF, ("golf", "birdie", "bogey", "putt", "fairway", "tee shot", "pga")),
    (Sport.SWIMMING, ("swimming", "swim", "freestyle", "butterfly", "breaststroke", "backstroke")),
    (Sport.ATHLETICS, ("athletics", "marathon", "relay", "hurdles", "long jump", "high jump", "javelin", "100m")),
    (Sport.FOOTBALL, ("football", "soccer", "goal", "penalty", "free kick", "corner kick", "offside", "premier league", "fifa")),
)

_RULE_PATTERNS = tuple(
    (sport, re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b"))
    for sport, keywords in SPORT_KEYWORD_RULES
)


def normalize_sport_name(name: Optional[str]) -> Optional[Sport]:
    """Map a declared sport (including synonyms like "soccer") onto the enumeration."""
    if not name:
        return None
    key = " ".join(str(name).strip().lower().replace("_", " ").split())
    if key in SPORT_SYNONYMS:
        return SPORT_SYNONYMS[key]
    try:
        return Sport(key)
    except ValueError:
        return None


def detect_sport_from_content(title: str = "", description: str = "", tags: Iterable[str] = ()) -> Optional[Sport]:
    """Return the first sport whose keywords appear in the text, or None."""
    text = " ".join([title or "", description or "", " ".join(t for t in (tags or ()) if t)]).lower()
    if not text.strip():
        return None
    for sport, pattern in _RULE_PATTERNS:
        if pattern.search(text):
            return sport
    return None


def classify_sport(
    team_sport: Optional[str] = None,
    title: str = "",
    description: str = "",
    tags: Iterable[str] = (),
) -> Sport:
    """
    Infer the sport of a video.

    Never raises: unknown declared sports fall through to content detection,
    and content detection falls back to football.
    """
    declared = normalize_sport_name(team_sport)
    if declared is not None:
        return declared
    if team_sport:
        logger.debug(f"Unrecognised team sport '{team_sport}', falling back to content detection")

    detected = detect_sport_from_content(title, description, tags)
    return detected or DEFAULT_SPORT


async def resolve_sport(
    team_lookup: Optional[Callable[[], Awaitable[Optional[str]]]],
    title: str = "",
    description: str = "",
    tags: Iterable[str] = (),
) -> Sport:
    """
    Classify using the owning team's declared sport when it can be looked up.

    A failing team lookup degrades to content-based detection instead of
    failing the pipeline.
    """
    team_sport = None
    if team_lookup is not None:
        try:
            team_sport = await team_lookup()
        except Exception as e:
            logger.warning(f"Team sport lookup failed, using content detection: {e}")
    return classify_sport(team_sport, title, description, tags)
