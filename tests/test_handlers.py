"""
Тесты обработчиков шагов.

AICODE-NOTE: обработчики проверяются напрямую, без оркестратора:
submit() -> StepResult, render() -> StepPrompt.
"""

import pytest

from habit_wizard.models import (
    ComparisonKind,
    Direction,
    EqualsCondition,
    FieldKind,
    HabitKind,
    ScoringMode,
)
from habit_wizard.wizard.events import Cancel, GoBack, Submit
from habit_wizard.wizard.handlers import build_handlers
from habit_wizard.wizard.handlers.base import StepOutcome
from habit_wizard.wizard.handlers.checklist import ChecklistHandler
from habit_wizard.wizard.options import CANCEL, FIX, PROCEED, field_kind_options
from habit_wizard.wizard.prompts import PromptFieldKind
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind
from habit_wizard.wizard.step_data import (
    BasicInfoData,
    CriteriaData,
    FieldConfigData,
    ScoringData,
    TierValidationData,
)

S = StepKind


@pytest.fixture
def handlers():
    return build_handlers()


def field_keys(prompt) -> list[str]:
    return [f.key for f in prompt.fields]


# ---------------------------------------------------------------- basic info


def test_basic_info_requires_title(handlers) -> None:
    state = WizardState(habit_kind=HabitKind.simple)

    result = handlers[S.basic_info].submit({"title": "   "}, state)

    assert result.outcome == StepOutcome.active
    assert result.errors[0].field == "title"
    assert result.state is state
    assert result.draft == {"title": "   "}


def test_basic_info_enforces_configured_title_length(handlers, monkeypatch) -> None:
    from habit_wizard.config import config

    monkeypatch.setattr(config, "TITLE_MAX_LENGTH", 5)
    result = handlers[S.basic_info].submit(
        {"title": "Long title"}, WizardState(habit_kind=HabitKind.simple)
    )

    assert result.outcome == StepOutcome.active
    assert "at most 5" in result.errors[0].message


def test_basic_info_sets_habit_kind_on_first_pass(handlers) -> None:
    result = handlers[S.basic_info].submit(
        {"title": "Read", "habit_kind": "elastic"}, WizardState(habit_kind=HabitKind.simple)
    )

    assert result.outcome == StepOutcome.completed
    assert result.state.habit_kind == HabitKind.elastic
    assert result.state.is_completed(S.basic_info)
    assert result.state.get_typed(S.basic_info, BasicInfoData).title == "Read"


def test_basic_info_locks_habit_kind_after_completion(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:1])

    prompt = handlers[S.basic_info].render(state)
    result = handlers[S.basic_info].submit({"title": "Run", "habit_kind": "simple"}, state)

    assert "habit_kind" not in field_keys(prompt)
    assert "habit_kind_note" in field_keys(prompt)
    assert result.state.habit_kind == HabitKind.elastic


def test_basic_info_renders_previous_answers(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:1])

    prompt = handlers[S.basic_info].render(state)
    defaults = {f.key: f.default for f in prompt.fields}

    assert defaults["title"] == "Exercise Duration"
    assert defaults["description"] == "Move every day"


def test_basic_info_help_text_is_optional(handlers) -> None:
    state = WizardState(habit_kind=HabitKind.simple)

    result = handlers[S.basic_info].submit(
        {"title": "Stretch", "help_text": "  Even 5 minutes counts!  "}, state
    )
    prompt = handlers[S.basic_info].render(result.state)

    data = result.state.get_typed(S.basic_info, BasicInfoData)
    assert data.help_text == "Even 5 minutes counts!"
    assert {f.key: f.default for f in prompt.fields}["help_text"] == "Even 5 minutes counts!"
    assert "help_text" in field_keys(handlers[S.basic_info].render(state))


def test_cancel_event_is_cancelled_outcome(handlers) -> None:
    state = WizardState(habit_kind=HabitKind.simple)

    assert handlers[S.basic_info].ingest(Cancel(), state).outcome == StepOutcome.cancelled
    assert handlers[S.basic_info].ingest(GoBack(), state).outcome == StepOutcome.active
    submitted = handlers[S.basic_info].ingest(Submit(values={"title": "Read"}), state)
    assert submitted.outcome == StepOutcome.completed


# -------------------------------------------------------------- field config


def test_elastic_habits_are_not_offered_boolean() -> None:
    elastic = {o.value for o in field_kind_options(HabitKind.elastic)}
    informational = {o.value for o in field_kind_options(HabitKind.informational)}

    assert "boolean" not in elastic
    assert "boolean" in informational


def test_field_config_rejects_unoffered_kind(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:1])
    result = handlers[S.field_config].submit({"field_kind": "boolean"}, state)

    assert result.outcome == StepOutcome.active
    assert result.errors[0].field == "field_kind"


def test_field_config_numeric_bounds(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:1])
    result = handlers[S.field_config].submit(
        {"field_kind": "numeric", "numeric_kind": "decimal", "min": "10", "max": "5"}, state
    )

    assert result.outcome == StepOutcome.active
    assert [e.field for e in result.errors] == ["max"]


def test_field_config_numeric_defaults(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:1])
    result = handlers[S.field_config].submit({"field_kind": "numeric"}, state)

    data = result.state.get_typed(S.field_config, FieldConfigData)
    assert data.numeric_kind.value == "unsigned_int"
    assert data.unit == "units"
    assert data.min is None and data.max is None


def test_field_config_informational_direction(handlers) -> None:
    state = WizardState(habit_kind=HabitKind.informational)

    prompt = handlers[S.field_config].render(state)
    result = handlers[S.field_config].submit({"field_kind": "numeric"}, state)

    assert "direction" in field_keys(prompt)
    data = result.state.get_typed(S.field_config, FieldConfigData)
    assert data.direction == Direction.neutral
    assert data.unit == "times"


def test_field_config_text_multiline(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:1])
    result = handlers[S.field_config].submit({"field_kind": "text", "multiline": "y"}, state)

    assert result.state.get_typed(S.field_config, FieldConfigData).multiline is True


def test_field_config_hides_numeric_questions_for_time(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:1])
    prompt = handlers[S.field_config].render(state)
    answers = {"field_kind": "time"}

    visible = [f.key for f in prompt.fields if f.is_visible(answers)]

    assert visible == ["field_kind"]


# ------------------------------------------------------------------- scoring


def test_scoring_text_field_offers_manual_only(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:1])
    state = builder.complete(state, S.field_config, {"field_kind": "text"})

    prompt = handlers[S.scoring].render(state)
    mode_field = next(f for f in prompt.fields if f.key == "mode")
    result = handlers[S.scoring].submit({"mode": "automatic"}, state)

    assert mode_field.option_values() == ("manual",)
    assert result.outcome == StepOutcome.active
    assert result.errors[0].field == "mode"


def test_scoring_elastic_direction_defaults_higher_better(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:2])
    result = handlers[S.scoring].submit({"mode": "manual"}, state)

    data = result.state.get_typed(S.scoring, ScoringData)
    assert data.mode == ScoringMode.manual
    assert data.direction == Direction.higher_better


def test_scoring_simple_has_no_direction(handlers) -> None:
    state = WizardState(habit_kind=HabitKind.simple)
    prompt = handlers[S.scoring].render(state)
    assert field_keys(prompt) == ["mode"]


# ----------------------------------------------------------------- checklist


def test_checklist_select_from_configured_ids() -> None:
    handler = ChecklistHandler(["morning", "evening"])
    state = WizardState(habit_kind=HabitKind.checklist)

    prompt = handler.render(state)
    unknown = handler.submit({"checklist_id": "night"}, state)
    known = handler.submit({"checklist_id": "evening"}, state)

    assert prompt.fields[0].kind == PromptFieldKind.select
    assert unknown.outcome == StepOutcome.active
    assert known.outcome == StepOutcome.completed


def test_checklist_free_text_without_configured_ids() -> None:
    handler = ChecklistHandler()
    state = WizardState(habit_kind=HabitKind.checklist)

    assert handler.render(state).fields[0].kind == PromptFieldKind.text
    assert handler.submit({"checklist_id": ""}, state).outcome == StepOutcome.active


# ------------------------------------------------------------------ criteria


def test_simple_criteria_is_a_note_and_builds_equals(handlers, builder) -> None:
    state = builder.build(
        HabitKind.simple,
        [(S.basic_info, {"title": "Floss"}), (S.scoring, {"mode": "automatic"})],
    )

    prompt = handlers[S.criteria].render(state)
    result = handlers[S.criteria].submit({}, state)

    assert [f.kind for f in prompt.fields] == [PromptFieldKind.note]
    data = result.state.get_typed(S.criteria, CriteriaData)
    assert data.condition == EqualsCondition(value=True)
    assert data.tier is None
    assert data.description == "Habit achieved when answer is yes"


def test_tier_parse_error_is_inline_and_keeps_draft(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:3])
    values = {"comparison": "greater_than_or_equal", "value": "abc"}

    result = handlers[S.mini_criteria].submit(values, state)

    assert result.outcome == StepOutcome.active
    assert result.errors[0].field == "value"
    assert "'abc'" in result.errors[0].message
    assert result.draft == values
    assert not result.state.is_completed(S.mini_criteria)


def test_range_error_points_at_second_value(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:3])
    result = handlers[S.mini_criteria].submit(
        {"comparison": "range", "value": "10", "value2": "x"}, state
    )
    assert result.errors[0].field == "value2"


def test_tier_comparison_defaults_to_previous_tier(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:3])
    state = builder.complete(
        state, S.mini_criteria, {"comparison": "less_than", "value": "20"}
    )

    prompt = handlers[S.midi_criteria].render(state)
    comparison = next(f for f in prompt.fields if f.key == "comparison")

    assert comparison.default == ComparisonKind.less_than.value


def test_custom_description_is_kept(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:3])
    result = handlers[S.mini_criteria].submit(
        {"comparison": "greater_than_or_equal", "value": "15", "description": "Quick walk"},
        state,
    )

    assert result.state.get_typed(S.mini_criteria, CriteriaData).description == "Quick walk"
    prompt = handlers[S.mini_criteria].render(result.state)
    assert {f.key: f.default for f in prompt.fields}["description"] == "Quick walk"


def test_generated_description_is_not_prefilled(handlers, elastic_state) -> None:
    prompt = handlers[S.mini_criteria].render(elastic_state)
    defaults = {f.key: f.default for f in prompt.fields}

    assert defaults["value"] == "15"
    assert defaults["description"] == ""


def test_time_criteria_has_no_range_fields(handlers, builder) -> None:
    state = builder.build(
        HabitKind.elastic,
        [
            (S.basic_info, {"title": "Wake up"}),
            (S.field_config, {"field_kind": "time"}),
            (S.scoring, {"mode": "automatic", "direction": "lower_better"}),
        ],
    )

    prompt = handlers[S.mini_criteria].render(state)

    assert "value2" not in field_keys(prompt)
    assert prompt.fields[0].option_values() == ("before", "after")


def test_can_enter_requires_earlier_steps(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:3])

    assert handlers[S.mini_criteria].can_enter(state)
    assert not handlers[S.midi_criteria].can_enter(state)
    assert not handlers[S.criteria].can_enter(state)


# ----------------------------------------------------------- tier validation


@pytest.fixture
def misordered_state(builder) -> WizardState:
    """Tiers 45 / 30 / 60: mini is harder than midi."""
    return builder.build(HabitKind.elastic, builder.elastic_values(("45", "30", "60")))


def test_tier_validation_ok_completes_without_choice(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values())

    prompt = handlers[S.tier_validation].render(state)
    result = handlers[S.tier_validation].submit({}, state)

    assert field_keys(prompt) == ["result"]
    assert result.outcome == StepOutcome.completed
    assert result.state.get_typed(S.tier_validation, TierValidationData).ok


def test_tier_validation_shows_violations_and_choices(handlers, misordered_state) -> None:
    prompt = handlers[S.tier_validation].render(misordered_state)
    note, choice = prompt.fields

    assert "mini criteria value (45.0) must be ≤ midi criteria value (30.0)" in note.description
    assert choice.option_values() == (PROCEED, FIX, CANCEL)
    assert choice.default == FIX


def test_tier_validation_proceed_acknowledges(handlers, misordered_state) -> None:
    result = handlers[S.tier_validation].submit({"choice": PROCEED}, misordered_state)

    data = result.state.get_typed(S.tier_validation, TierValidationData)
    assert result.outcome == StepOutcome.completed
    assert not data.ok
    assert data.acknowledged
    assert len(data.violations) == 1


def test_tier_validation_fix_goes_back_to_mini(handlers, misordered_state) -> None:
    result = handlers[S.tier_validation].submit({"choice": FIX}, misordered_state)

    assert result.outcome == StepOutcome.back
    assert result.jump_to == S.mini_criteria
    assert not result.state.is_completed(S.tier_validation)


def test_tier_validation_cancel(handlers, misordered_state) -> None:
    result = handlers[S.tier_validation].submit({"choice": CANCEL}, misordered_state)
    assert result.outcome == StepOutcome.cancelled


def test_strict_ordering_removes_proceed(handlers, misordered_state, monkeypatch) -> None:
    from habit_wizard.config import config

    monkeypatch.setattr(config, "STRICT_TIER_ORDERING", True)

    prompt = handlers[S.tier_validation].render(misordered_state)
    result = handlers[S.tier_validation].submit({"choice": PROCEED}, misordered_state)

    assert PROCEED not in prompt.fields[1].option_values()
    assert result.outcome == StepOutcome.active


def test_text_tiers_are_exempt_from_ordering(handlers) -> None:
    state = WizardState(habit_kind=HabitKind.elastic).set_step(
        S.field_config, FieldConfigData(field_kind=FieldKind.text)
    )
    result = handlers[S.tier_validation].submit({}, state)
    assert result.outcome == StepOutcome.completed


# -------------------------------------------------------------- confirmation


def test_confirmation_preview_and_submit(handlers, elastic_state) -> None:
    prompt = handlers[S.confirmation].render(elastic_state)
    preview = prompt.fields[0].description

    result = handlers[S.confirmation].submit({"confirmed": True}, elastic_state)

    assert "Mini achievement when value >= 15.0 minutes" in preview
    assert prompt.fields[1].label == "Create this habit?"
    assert result.outcome == StepOutcome.completed


def test_confirmation_declined_goes_back(handlers, elastic_state) -> None:
    result = handlers[S.confirmation].submit({"confirmed": False}, elastic_state)

    assert result.outcome == StepOutcome.back
    assert result.jump_to == S.tier_validation


def test_confirmation_rejects_incomplete_state(handlers, builder) -> None:
    state = builder.build(HabitKind.elastic, builder.elastic_values()[:3])
    state = state.mark_incomplete(S.scoring)

    prompt = handlers[S.confirmation].render(state)
    result = handlers[S.confirmation].submit({"confirmed": True}, state)

    assert "incomplete" in prompt.fields[0].description
    assert result.outcome == StepOutcome.active
    assert any("Scoring" in e.message for e in result.errors)
