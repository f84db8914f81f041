"""
End-to-end тесты цикла визарда со сценарным терминалом.

AICODE-NOTE: ScriptedTerminal (conftest.py) отдаёт события по очереди
и запоминает каждую отрисованную форму, так что можно проверять
и результат, и то, что видел пользователь.
"""

import pytest

from habit_wizard.core.errors import MissingStepDataError
from habit_wizard.models import Direction, HabitKind, ScoringMode
from habit_wizard.wizard.events import Cancel, GoBack, GoForward, JumpTo, Resize
from habit_wizard.wizard.middlewares.error_handler import ErrorHandlingMiddleware
from habit_wizard.wizard.options import FIX
from habit_wizard.wizard.orchestrator import HabitWizard
from habit_wizard.wizard.state import WizardState
from habit_wizard.wizard.states import StepKind

S = StepKind

BASIC = {"title": "Exercise Duration", "habit_kind": "elastic"}
FIELD = {"field_kind": "numeric", "numeric_kind": "unsigned_int", "unit": "minutes"}
AUTOMATIC = {"mode": "automatic", "direction": "higher_better"}


def tier(value: str) -> dict:
    return {"comparison": "greater_than_or_equal", "value": value}


@pytest.mark.asyncio
async def test_elastic_automatic_happy_path(scripted_terminal):
    """Exercise Duration: 15 / 30 / 60 minutes, confirmed."""
    terminal = scripted_terminal(
        [BASIC, FIELD, AUTOMATIC, tier("15"), tier("30"), tier("60"), {}, {"confirmed": True}]
    )
    wizard = HabitWizard(terminal)

    result = await wizard.run()

    assert result.ok
    assert result.habit.mini_criteria.description == "Mini achievement when value >= 15.0 minutes"
    assert result.habit.direction == Direction.higher_better
    assert terminal.steps_seen == [
        S.basic_info,
        S.field_config,
        S.scoring,
        S.mini_criteria,
        S.midi_criteria,
        S.maxi_criteria,
        S.tier_validation,
        S.confirmation,
    ]
    # the plan grows once automatic scoring is chosen
    assert [p.total for p in terminal.prompts] == [3, 4, 4, 8, 8, 8, 8, 8]
    assert [p.position for p in terminal.prompts] == [1, 2, 3, 4, 5, 6, 7, 8]
    assert wizard.state is None


@pytest.mark.asyncio
async def test_cancel_discards_state(scripted_terminal):
    terminal = scripted_terminal([BASIC, Cancel()])
    wizard = HabitWizard(terminal)

    result = await wizard.run()

    assert result.cancelled
    assert result.habit is None
    assert wizard.state is None


@pytest.mark.asyncio
async def test_back_keeps_previous_answers(scripted_terminal):
    terminal = scripted_terminal([BASIC, GoBack(), Cancel()])

    await HabitWizard(terminal).run()

    back_prompt = terminal.prompts[2]
    defaults = {f.key: f.default for f in back_prompt.fields}
    assert back_prompt.step == S.basic_info
    assert defaults["title"] == "Exercise Duration"
    assert terminal.prompts[1].can_go_back
    assert back_prompt.can_go_forward


@pytest.mark.asyncio
async def test_invalid_value_rerenders_with_inline_error(scripted_terminal):
    terminal = scripted_terminal(
        [BASIC, FIELD, AUTOMATIC, tier("abc"), Resize(120, 40), Cancel()]
    )

    await HabitWizard(terminal).run()

    rejected, resized = terminal.prompts[4], terminal.prompts[5]
    assert rejected.step == S.mini_criteria
    assert rejected.field_errors("value")
    assert "'abc'" in rejected.field_errors("value")[0].message
    assert {f.key: f.default for f in rejected.fields}["value"] == "abc"
    # a redraw keeps the pending error
    assert resized.step == S.mini_criteria
    assert resized.errors == rejected.errors


@pytest.mark.asyncio
async def test_odd_digits_in_time_stay_an_inline_error(scripted_terminal):
    terminal = scripted_terminal(
        [
            {"title": "Wake up", "habit_kind": "elastic"},
            {"field_kind": "time"},
            {"mode": "automatic", "direction": "lower_better"},
            {"comparison": "before", "value": "²:00"},
            Cancel(),
        ]
    )

    result = await HabitWizard(terminal).run()

    assert result.cancelled
    rejected = terminal.prompts[4]
    assert rejected.step == S.mini_criteria
    assert "not a valid time" in rejected.field_errors("value")[0].message


@pytest.mark.asyncio
async def test_fix_choice_returns_to_mini(scripted_terminal):
    """45 / 30 / 60 is out of order; the user fixes mini and walks forward again."""
    terminal = scripted_terminal(
        [
            BASIC, FIELD, AUTOMATIC,
            tier("45"), tier("30"), tier("60"),
            {"choice": FIX},
            tier("15"), GoForward(), GoForward(),
            {},
            {"confirmed": True},
        ]
    )

    result = await HabitWizard(terminal).run()

    assert result.ok
    assert result.habit.mini_criteria.description.endswith(">= 15.0 minutes")
    assert terminal.steps_seen[6:] == [
        S.tier_validation,
        S.mini_criteria,
        S.midi_criteria,
        S.maxi_criteria,
        S.tier_validation,
        S.confirmation,
    ]
    first_check = terminal.prompts[6]
    assert "mini criteria value (45.0) must be ≤ midi criteria value (30.0)" in (
        first_check.fields[0].description
    )


@pytest.mark.asyncio
async def test_switching_to_manual_shrinks_plan(scripted_terminal):
    terminal = scripted_terminal(
        [
            BASIC, FIELD, AUTOMATIC, tier("15"),
            JumpTo(S.scoring),
            {"mode": "manual", "direction": "higher_better"},
            {"confirmed": True},
        ]
    )

    result = await HabitWizard(terminal).run()

    assert result.habit.scoring_mode == ScoringMode.manual
    assert result.habit.mini_criteria is None
    assert terminal.steps_seen[-1] == S.confirmation
    assert terminal.prompts[-1].total == 4
    assert terminal.prompts[-1].position == 4


@pytest.mark.asyncio
async def test_illegal_jump_reports_error(scripted_terminal):
    terminal = scripted_terminal([JumpTo(S.confirmation), Cancel()])

    await HabitWizard(terminal, habit_kind=HabitKind.elastic).run()

    second = terminal.prompts[1]
    assert second.step == S.basic_info
    assert second.step_errors()
    assert "cannot jump" in second.step_errors()[0].message


@pytest.mark.asyncio
async def test_forward_on_open_step_is_refused(scripted_terminal):
    terminal = scripted_terminal([GoForward(), Cancel()])

    await HabitWizard(terminal).run()

    assert terminal.prompts[1].step == S.basic_info
    assert terminal.prompts[1].errors


@pytest.mark.asyncio
async def test_declined_confirmation_goes_back(scripted_terminal):
    terminal = scripted_terminal(
        [
            {"title": "Floss"}, {"mode": "manual"},
            {"confirmed": False},
            Cancel(),
        ]
    )

    result = await HabitWizard(terminal).run()

    assert result.cancelled
    assert terminal.steps_seen == [S.basic_info, S.scoring, S.confirmation, S.scoring]


@pytest.mark.asyncio
async def test_edit_mode_resaves_habit(scripted_terminal, elastic_state):
    from habit_wizard.core.use_cases.materialize_habit import materialize_habit
    from habit_wizard.core.use_cases.seed_from_habit import seed_state_from_habit

    habit = materialize_habit(elastic_state).model_copy(update={"id": "exercise"})
    terminal = scripted_terminal(
        [JumpTo(S.tier_validation), GoForward(), {"confirmed": True}]
    )

    result = await HabitWizard(terminal, seed_state_from_habit(habit)).run()

    assert result.habit == habit
    assert terminal.prompts[2].fields[1].label == "Save changes?"


@pytest.mark.asyncio
async def test_cursor_on_unreachable_step_moves_to_first_open(scripted_terminal):
    state = WizardState(habit_kind=HabitKind.elastic, current_step=S.scoring)
    terminal = scripted_terminal([Cancel()])

    await HabitWizard(terminal, state).run()

    assert terminal.prompts[0].step == S.basic_info


@pytest.mark.asyncio
async def test_missing_data_at_confirmation_is_reported(scripted_terminal, elastic_state):
    """Completed flags without data must not produce a half-built habit."""
    state = elastic_state.clear_step(S.midi_criteria).set_current_step(S.confirmation)
    terminal = scripted_terminal([{"confirmed": True}])
    wizard = HabitWizard(terminal, state)

    result = await ErrorHandlingMiddleware(terminal)(wizard.run)

    assert isinstance(result.error, MissingStepDataError)
    assert result.error.step == S.midi_criteria


@pytest.mark.asyncio
async def test_terminal_failure_is_caught_by_middleware(scripted_terminal):
    terminal = scripted_terminal([])

    result = await ErrorHandlingMiddleware(terminal)(HabitWizard(terminal).run)

    assert isinstance(result.error, AssertionError)
    assert terminal.messages[-1][1] == "error"
