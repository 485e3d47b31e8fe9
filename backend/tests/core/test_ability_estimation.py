"""
Tests for ability estimation and response processing.

Tests cover:
- Theta estimate from difficulty anchors and proportion correct
- Clamping to [-3, 3]
- Unknown question ids are skipped
- Standard error schedule and floor
- process_response bookkeeping and validation
"""
import math
from datetime import timedelta

import pytest

from screener.core.adaptive.ability_estimation import (
    STANDARD_ERROR_FLOOR,
    THETA_MAX,
    THETA_MIN,
    calculate_standard_error,
    estimate_ability,
    process_response,
)
from screener.core.adaptive.exceptions import SessionClosedError
from screener.core.adaptive.session import QuestionResponse, finalize_session
from screener.models.enums import QuestionFormat
from tests.conftest import FIXED_NOW, make_question


def _response(question_id, is_correct):
    return QuestionResponse(
        question_id=question_id,
        student_answer="A",
        is_correct=is_correct,
        time_spent_seconds=15.0,
        timestamp=FIXED_NOW,
    )


@pytest.fixture
def lookup():
    questions = [
        make_question("very-easy", difficulty=1),
        make_question("easy", difficulty=2),
        make_question("medium", difficulty=3),
        make_question("hard", difficulty=4),
        make_question("very-hard", difficulty=5),
    ]
    return {q.id: q for q in questions}


class TestEstimateAbility:
    """theta = mean(anchor) + (p_correct - 0.5) * 2, clamped."""

    def test_empty_history_is_zero(self, lookup):
        assert estimate_ability([], lookup) == 0.0

    def test_single_correct_medium(self, lookup):
        assert estimate_ability([_response("medium", True)], lookup) == pytest.approx(1.0)

    def test_single_incorrect_medium(self, lookup):
        assert estimate_ability([_response("medium", False)], lookup) == pytest.approx(-1.0)

    def test_mixed_history(self, lookup):
        responses = [
            _response("easy", True),
            _response("medium", True),
            _response("hard", False),
            _response("very-hard", False),
        ]
        # mean anchor = (-1 + 0 + 1 + 2) / 4 = 0.5; p = 0.5 -> no shift
        assert estimate_ability(responses, lookup) == pytest.approx(0.5)

    def test_clamped_at_top(self, lookup):
        responses = [_response("very-hard", True) for _ in range(5)]
        assert estimate_ability(responses, lookup) == THETA_MAX

    def test_clamped_at_bottom(self, lookup):
        responses = [_response("very-easy", False) for _ in range(5)]
        assert estimate_ability(responses, lookup) == THETA_MIN

    def test_unknown_questions_are_skipped(self, lookup):
        responses = [_response("medium", True), _response("retired-item", False)]
        # Only the medium response counts, so p = 1.0
        assert estimate_ability(responses, lookup) == pytest.approx(1.0)

    def test_all_unknown_is_zero(self, lookup):
        responses = [_response("gone-1", True), _response("gone-2", False)]
        assert estimate_ability(responses, lookup) == 0.0

    @pytest.mark.parametrize("n_correct", range(0, 6))
    def test_more_correct_never_lowers_estimate(self, lookup, n_correct):
        base = [_response("medium", i < n_correct) for i in range(5)]
        better = [_response("medium", i <= n_correct) for i in range(5)]
        assert estimate_ability(better, lookup) >= estimate_ability(base, lookup)


class TestStandardError:
    """SE(n) = max(0.2, 1 / sqrt(n + 1))."""

    @pytest.mark.parametrize(
        "n,expected",
        [(0, 1.0), (3, 0.5), (8, 1 / 3), (15, 0.25), (24, 0.2), (100, 0.2)],
    )
    def test_schedule(self, n, expected):
        assert calculate_standard_error(n) == pytest.approx(expected)

    def test_strictly_decreasing_until_floor(self):
        values = [calculate_standard_error(n) for n in range(0, 24)]
        assert all(a > b for a, b in zip(values, values[1:]))

    def test_never_below_floor(self):
        assert min(calculate_standard_error(n) for n in range(0, 500)) == STANDARD_ERROR_FLOOR

    def test_negative_count_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            calculate_standard_error(-1)


class TestProcessResponse:
    """Recording an answer updates history, counters and estimates."""

    def test_updates_session_in_place(self, math_session, fixed_now):
        question = make_question(
            "q1",
            strand="Geometry",
            difficulty=3,
            question_format=QuestionFormat.TRUE_FALSE,
            standards=("5.G.A.1", "5.G.A.2"),
        )
        answered_at = fixed_now + timedelta(seconds=40)

        result = process_response(
            math_session, question, True, 40.0, {"q1": question}, now=answered_at
        )

        assert result is math_session
        assert math_session.num_questions == 1
        response = math_session.question_history[0]
        assert response.question_id == "q1"
        assert response.student_answer == "correct"
        assert response.is_correct is True
        assert response.time_spent_seconds == 40.0
        assert response.timestamp == answered_at
        assert math_session.strands_touched == {"Geometry": 1}
        assert math_session.formats_used == {"true_false": 1}
        assert math_session.difficulties_used == {3: 1}
        assert math_session.standards_covered == ["5.G.A.1", "5.G.A.2"]
        assert math_session.current_ability_estimate == pytest.approx(1.0)
        assert math_session.standard_error == pytest.approx(1 / math.sqrt(2))
        assert math_session.last_update_time == answered_at

    def test_incorrect_default_answer(self, math_session):
        question = make_question("q1")
        process_response(math_session, question, False, 10.0, {"q1": question})
        assert math_session.question_history[0].student_answer == "incorrect"

    def test_explicit_answer_is_kept(self, math_session):
        question = make_question("q1")
        process_response(
            math_session, question, True, 10.0, {"q1": question}, student_answer="B"
        )
        assert math_session.question_history[0].student_answer == "B"

    def test_standards_are_deduplicated_in_order(self, math_session):
        first = make_question("q1", standards=("A", "B"))
        second = make_question("q2", standards=("B", "C", "A"))
        lookup = {"q1": first, "q2": second}

        process_response(math_session, first, True, 10.0, lookup)
        process_response(math_session, second, True, 10.0, lookup)

        assert math_session.standards_covered == ["A", "B", "C"]

    def test_counters_accumulate(self, math_session):
        questions = [
            make_question("q1", strand="Geometry", difficulty=2),
            make_question("q2", strand="Geometry", difficulty=2),
            make_question("q3", strand="Measurement & Data", difficulty=4),
        ]
        lookup = {q.id: q for q in questions}
        for question in questions:
            process_response(math_session, question, True, 10.0, lookup)

        assert math_session.strands_touched == {"Geometry": 2, "Measurement & Data": 1}
        assert math_session.difficulties_used == {2: 2, 4: 1}
        assert math_session.formats_used == {"multiple_choice": 3}
        assert sum(math_session.strands_touched.values()) == math_session.num_questions

    def test_question_missing_from_lookup_still_counted(self, math_session):
        question = make_question("orphan", strand="Geometry")
        process_response(math_session, question, True, 10.0, {})

        assert math_session.num_questions == 1
        assert math_session.strands_touched == {"Geometry": 1}
        assert math_session.current_ability_estimate == 0.0
        assert math_session.standard_error == pytest.approx(1 / math.sqrt(2))

    def test_negative_time_raises(self, math_session):
        question = make_question("q1")
        with pytest.raises(ValueError, match="time_spent_seconds"):
            process_response(math_session, question, True, -1.0, {"q1": question})
        assert math_session.num_questions == 0

    def test_closed_session_raises(self, math_session):
        question = make_question("q1")
        finalize_session(math_session)
        with pytest.raises(SessionClosedError):
            process_response(math_session, question, True, 10.0, {"q1": question})
        assert math_session.num_questions == 0
