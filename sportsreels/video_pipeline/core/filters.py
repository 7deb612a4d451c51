"""
Combinable filters over normalized player actions and key moments.

All supplied criteria must match. The result is always a subsequence of the
input in its original order, and an empty filter returns the input unchanged.
"""

from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .models import KeyMoment, PlayerAction


class FilterSpec(BaseModel):
    """
    Filter criteria for browsing actions and moments.

    Attributes:
        type: exact (case-insensitive) action label or moment type
        text: case-insensitive substring searched in descriptions; for moments
            also in context quotes and participant names
        player_id: tagged player id, resolved to a display name through the roster
        status: action outcome or moment importance
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Optional[str] = None
    text: Optional[str] = None
    player_id: Optional[str] = None
    status: Optional[str] = None

    @field_validator("type", "text", "player_id", "status", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def is_empty(self) -> bool:
        return not any(_given(value) for value in (self.type, self.text, self.player_id, self.status))


def _given(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def _same(left: Optional[str], right: Optional[str]) -> bool:
    return (left or "").strip().lower() == (right or "").strip().lower()


def _contains(needle: str, haystack: Iterable[Optional[str]]) -> bool:
    return any(needle in (value or "").lower() for value in haystack)


def _player_names(player_id: str, roster: Optional[Dict[str, str]]) -> List[str]:
    names = [player_id.lower()]
    if roster and roster.get(player_id):
        names.append(roster[player_id].lower())
    return names


def _involves(participants: Iterable[str], player_id: str, roster: Optional[Dict[str, str]]) -> bool:
    wanted = _player_names(player_id, roster)
    return any((p or "").strip().lower() in wanted for p in participants)


def action_matches(action: PlayerAction, spec: FilterSpec, roster: Optional[Dict[str, str]] = None) -> bool:
    if _given(spec.type) and not _same(action.action, spec.type):
        return False
    text = (spec.text or "").strip().lower()
    if text and not _contains(text, (action.description,)):
        return False
    if _given(spec.player_id) and not _involves(action.players, _given(spec.player_id), roster):
        return False
    if _given(spec.status) and not _same(action.outcome, spec.status):
        return False
    return True


def moment_matches(moment: KeyMoment, spec: FilterSpec, roster: Optional[Dict[str, str]] = None) -> bool:
    if _given(spec.type) and not _same(moment.type, spec.type):
        return False
    text = (spec.text or "").strip().lower()
    if text and not _contains(text, (moment.description, moment.context, *moment.participants)):
        return False
    if _given(spec.player_id) and not _involves(moment.participants, _given(spec.player_id), roster):
        return False
    if _given(spec.status) and not _same(moment.importance.value, spec.status):
        return False
    return True


def filter_actions(
    actions: List[PlayerAction],
    spec: Optional[FilterSpec] = None,
    roster: Optional[Dict[str, str]] = None,
) -> List[PlayerAction]:
    if spec is None or spec.is_empty():
        return list(actions)
    return [a for a in actions if action_matches(a, spec, roster)]


def filter_moments(
    moments: List[KeyMoment],
    spec: Optional[FilterSpec] = None,
    roster: Optional[Dict[str, str]] = None,
) -> List[KeyMoment]:
    if spec is None or spec.is_empty():
        return list(moments)
    return [m for m in moments if moment_matches(m, spec, roster)]
