"""
Unit tests for the results digests.
"""

import pytest

from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.voting import (
    digest_single_choice_results,
    digest_single_question_results,
)


def _metadata(*questions):
    """Process metadata with the given (title, [choice titles]) questions"""
    return {
        "questions": [
            {
                "title": {"default": title},
                "description": {"default": "Desc"},
                "choices": [
                    {"title": {"default": choice}, "value": value}
                    for value, choice in enumerate(choices)
                ],
            }
            for title, choices in questions
        ]
    }


class TestSingleChoiceResults:
    """Tests for per question tallies."""

    def test_one_question(self):
        """Test counts are zipped with the choices of the question."""
        metadata = _metadata(("Q1", ["Should be 10", "Should be 20", "Should be 30"]))
        raw = {"results": [["10", "20", "30"]], "envelopHeight": 1234}

        digest = digest_single_choice_results(raw, metadata)

        assert digest.total_votes == 1234
        assert len(digest.questions) == 1
        assert digest.questions[0].title == {"default": "Q1"}
        assert [r.votes for r in digest.questions[0].vote_results] == [10, 20, 30]
        assert digest.questions[0].vote_results[0].title == {"default": "Should be 10"}

    def test_several_questions(self):
        """Test each question reads its own row."""
        metadata = _metadata(
            ("Q1", ["Should be 100", "Should be 200", "Should be 300"]),
            ("Q2", ["Should be 400", "Should be 500", "Should be 600"]),
        )
        raw = {"results": [["100", "200", "300"], ["400", "500", "600"]], "envelopHeight": 2345}

        digest = digest_single_choice_results(raw, metadata)

        assert digest.total_votes == 2345
        assert [q.title["default"] for q in digest.questions] == ["Q1", "Q2"]
        assert [r.votes for r in digest.questions[1].vote_results] == [400, 500, 600]
        assert digest.questions[1].vote_results[2].title == {"default": "Should be 600"}

    def test_missing_counts_are_zero(self):
        """Test choices without a count in the results."""
        metadata = _metadata(("Q1", ["A", "B", "C"]), ("Q2", ["D"]))
        raw = {"results": [["7"]], "envelopHeight": 7}

        digest = digest_single_choice_results(raw, metadata)

        assert [r.votes for r in digest.questions[0].vote_results] == [7, 0, 0]
        assert [r.votes for r in digest.questions[1].vote_results] == [0]


class TestSingleQuestionResults:
    """Tests for index weighted tallies."""

    def test_two_options(self):
        """Test each option sums its counts weighted by value index."""
        metadata = _metadata(("Q1", ["AA", "BB"]))
        raw = {"results": [["0", "0", "3"], ["0", "10", "0"]], "envelopHeight": 1234}

        digest = digest_single_question_results(raw, metadata)

        assert digest.total_votes == 1234
        assert digest.title == {"default": "Q1"}
        assert [o.title["default"] for o in digest.options] == ["AA", "BB"]
        assert [o.votes for o in digest.options] == [6, 10]

    def test_big_counts(self):
        """Test counts beyond 64 bits are kept exact."""
        metadata = _metadata(("Q11", ["AAAA", "BBBB", "CCCC", "DDDD"]))
        raw = {
            "results": [
                ["3", "0", "0"],
                ["2", "1", "0"],
                ["0", "0", "3"],
                ["0", "0", "1000000000000000000000000000000000"],
            ],
            "envelopHeight": 2345,
        }

        digest = digest_single_question_results(raw, metadata)

        assert [o.votes for o in digest.options] == [
            0,
            1,
            6,
            2000000000000000000000000000000000,
        ]

    def test_uneven_rows(self):
        """Test rows of different lengths."""
        metadata = _metadata(("Q111", ["AAAAA", "BBBBB", "CCCCC", "DDDDD"]))
        raw = {
            "results": [
                ["3", "0", "0", "10"],
                ["10000000", "1000000000000000000000000000000000", "0", "0"],
                ["0", "0", "5000000000000000000000000000000000"],
                ["5000", "0", "0", "1"],
            ],
            "envelopHeight": 3456,
        }

        digest = digest_single_question_results(raw, metadata)

        assert [o.votes for o in digest.options] == [
            30,
            1000000000000000000000000000000000,
            10000000000000000000000000000000000,
            3,
        ]

    def test_rows_must_match_choices(self):
        """Test results with a different number of options than the metadata."""
        metadata = _metadata(("Q1", ["AA", "BB"]))

        with pytest.raises(MalformedInputException, match="don't match"):
            digest_single_question_results({"results": [["1"]]}, metadata)

    @pytest.mark.parametrize("value", ["-1", "1.5", "abc", "", None])
    def test_invalid_values(self, value):
        """Test counts that are not unsigned decimal strings."""
        metadata = _metadata(("Q1", ["AA"]))

        with pytest.raises(MalformedInputException):
            digest_single_question_results({"results": [["1", value]]}, metadata)

    @pytest.mark.parametrize(
        "raw, metadata",
        [
            ({"results": "1"}, _metadata(("Q1", ["AA"]))),
            ({"results": [["1"]]}, {"questions": []}),
            ({"results": [["1"]]}, {}),
            ({"results": [["1"]]}, {"questions": [{"title": "Q1"}]}),
        ],
    )
    def test_invalid_input(self, raw, metadata):
        """Test malformed results and metadata."""
        with pytest.raises(MalformedInputException):
            digest_single_question_results(raw, metadata)
