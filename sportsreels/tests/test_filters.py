import pytest

from sportsreels.video_pipeline.core.filters import FilterSpec, filter_actions, filter_moments
from sportsreels.video_pipeline.core.models import KeyMoment, PlayerAction


@pytest.fixture
def actions():
    return [
        PlayerAction(timestamp=12, action="pass", description="Long diagonal switch", players=["Sean Murphy"],
                     outcome="successful"),
        PlayerAction(timestamp=340, action="Tackle", description="Sliding tackle on the wing",
                     players=["Ciaran Walsh"], outcome="successful"),
        PlayerAction(timestamp=2710, action="shot", description="Curling effort", players=["Sean Murphy"],
                     outcome="failed"),
    ]


@pytest.fixture
def moments():
    return [
        KeyMoment(timestamp=600, type="goal", description="Header from a corner", importance="critical",
                  participants=["Ciaran Walsh"]),
        KeyMoment(timestamp=2710, type="chance", description="Best chance of the match", importance="high",
                  context="That should have been the winner", participants=["Sean Murphy"]),
    ]


ROSTER = {"p7": "Sean Murphy", "p4": "Ciaran Walsh"}


def test_empty_filter_returns_everything(actions, moments):
    assert filter_actions(actions) == actions
    assert filter_actions(actions, FilterSpec(text="   ")) == actions
    assert filter_moments(moments, FilterSpec()) == moments


def test_blank_fields_are_ignored(actions, moments):
    spec = FilterSpec(type=" ", status="\t", playerId="  ", text="")

    assert spec.type is None and spec.status is None and spec.player_id is None
    assert spec.is_empty()
    assert filter_actions(actions, spec, ROSTER) == actions
    assert filter_moments(moments, spec, ROSTER) == moments

    spec.type = "  "
    assert filter_actions(actions, spec) == actions
    assert filter_actions(actions, FilterSpec(type=" ", status="failed")) == filter_actions(actions, FilterSpec(status="failed"))


def test_type_is_case_insensitive(actions):
    result = filter_actions(actions, FilterSpec(type="tackle"))
    assert [a.timestamp for a in result] == [340.0]


def test_text_searches_descriptions(actions):
    result = filter_actions(actions, FilterSpec(text="DIAGONAL"))
    assert [a.action for a in result] == ["pass"]


def test_text_searches_moment_context_and_participants(moments):
    assert [m.type for m in filter_moments(moments, FilterSpec(text="winner"))] == ["chance"]
    assert [m.type for m in filter_moments(moments, FilterSpec(text="walsh"))] == ["goal"]


def test_player_id_is_resolved_through_roster(actions, moments):
    spec = FilterSpec(player_id="p7")

    assert [a.action for a in filter_actions(actions, spec, ROSTER)] == ["pass", "shot"]
    assert [m.type for m in filter_moments(moments, spec, ROSTER)] == ["chance"]


def test_unknown_player_matches_nothing(actions):
    assert filter_actions(actions, FilterSpec(player_id="p99"), ROSTER) == []


def test_status_matches_outcome_and_importance(actions, moments):
    assert [a.action for a in filter_actions(actions, FilterSpec(status="failed"))] == ["shot"]
    assert [m.type for m in filter_moments(moments, FilterSpec(status="critical"))] == ["goal"]


def test_criteria_combine(actions):
    spec = FilterSpec(player_id="p7", status="successful")
    assert [a.action for a in filter_actions(actions, spec, ROSTER)] == ["pass"]


def test_result_keeps_input_order(actions):
    result = filter_actions(list(reversed(actions)), FilterSpec(status="successful"))
    assert [a.timestamp for a in result] == [340.0, 12.0]


def test_filter_spec_accepts_camel_case():
    spec = FilterSpec.model_validate({"playerId": "p7", "type": "shot"})
    assert spec.player_id == "p7"
    assert not spec.is_empty()
