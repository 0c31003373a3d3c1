"""
Digests of the raw results reported by a gateway.

Raw results come as ``{results: [[count, ...], ...], envelopHeight}``,
one row of decimal strings per question (or per option, for single
question processes). Titles are taken from the process metadata.
"""

import re
from typing import Any, List, Mapping, Sequence

from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.voting.models import (
    OptionResult,
    QuestionResults,
    SingleChoiceResults,
    SingleQuestionResults,
)

_DIGITS_RE = re.compile(r"^[0-9]+$")


def _vote_count(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    if isinstance(value, str) and _DIGITS_RE.match(value):
        return int(value)
    raise MalformedInputException(f"Invalid result value: {value!r}")


def _rows(raw_results: Mapping[str, Any]) -> List[Sequence[Any]]:
    if not isinstance(raw_results, Mapping):
        raise MalformedInputException("Invalid results")
    results = raw_results.get("results")
    if not isinstance(results, list) or not all(
        isinstance(row, (list, tuple)) for row in results
    ):
        raise MalformedInputException("Invalid results values")
    return results


def _questions(metadata: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    questions = metadata.get("questions") if isinstance(metadata, Mapping) else None
    if not isinstance(questions, list) or not all(
        isinstance(q, Mapping)
        and isinstance(q.get("choices"), list)
        and all(isinstance(choice, Mapping) for choice in q["choices"])
        for q in questions
    ):
        raise MalformedInputException("Invalid metadata")
    return questions


def digest_single_choice_results(
    raw_results: Mapping[str, Any], metadata: Mapping[str, Any]
) -> SingleChoiceResults:
    """
    Zip the raw results with the questions and choices of the metadata.

    Each choice gets the count at its position in the row of its question.
    Missing counts are reported as 0.
    """
    rows = _rows(raw_results)
    questions = []
    for idx, question in enumerate(_questions(metadata)):
        row = rows[idx] if idx < len(rows) else ()
        questions.append(
            QuestionResults(
                title=question.get("title"),
                vote_results=tuple(
                    OptionResult(
                        title=choice.get("title"),
                        votes=_vote_count((row[i] if i < len(row) else 0) or 0),
                    )
                    for i, choice in enumerate(question["choices"])
                ),
            )
        )

    return SingleChoiceResults(
        total_votes=raw_results.get("envelopHeight", 0), questions=tuple(questions)
    )


def digest_single_question_results(
    raw_results: Mapping[str, Any], metadata: Mapping[str, Any]
) -> SingleQuestionResults:
    """
    Aggregate the results of a single question process.

    Row ``i`` holds the counts of option ``i`` for every value it may take;
    the option's total is the sum of ``count * value index``.

    Raises:
        MalformedInputException: If the results are not a list of digit
            strings or do not have one row per choice.
    """
    rows = _rows(raw_results)
    questions = _questions(metadata)
    if not questions:
        raise MalformedInputException("Invalid metadata")

    question = questions[0]
    choices = question["choices"]
    if len(choices) != len(rows):
        raise MalformedInputException(
            "The raw results don't match with the given metadata"
        )

    options = tuple(
        OptionResult(
            title=choice.get("title"),
            votes=sum(_vote_count(value) * index for index, value in enumerate(row)),
        )
        for choice, row in zip(choices, rows)
    )
    return SingleQuestionResults(
        total_votes=raw_results.get("envelopHeight", 0),
        title=question.get("title"),
        options=options,
    )
