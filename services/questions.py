"""Filter-question answers and the provider of required questions."""
from dataclasses import dataclass
from typing import Union

from models.question import BookingAnswer, InfrastructureQuestion
from services.errors import ValidationError


@dataclass(frozen=True)
class TextAnswer:
    question_id: int
    text: str

    def is_present(self) -> bool:
        return bool((self.text or "").strip())

    def to_row(self, booking_id: int) -> BookingAnswer:
        return BookingAnswer(booking_id=booking_id, question_id=self.question_id, answer_text=self.text)


@dataclass(frozen=True)
class FileAnswer:
    question_id: int
    file_ref: str
    original_name: str = None

    def is_present(self) -> bool:
        return bool(self.file_ref)

    def to_row(self, booking_id: int) -> BookingAnswer:
        return BookingAnswer(
            booking_id=booking_id,
            question_id=self.question_id,
            answer_text=self.original_name or self.file_ref,
            document_path=self.file_ref,
        )


Answer = Union[TextAnswer, FileAnswer]


def parse_answers(payload) -> list:
    """
    Accepts ``{"<question_id>": {"type": "text", "value": ...}}`` or
    ``{"<question_id>": {"type": "file", "file_ref": ..., "original_name": ...}}``.
    A bare string is shorthand for a text answer.
    """
    if payload is None:
        return []
    if not isinstance(payload, dict):
        raise ValidationError("answers must be an object keyed by question id")

    answers = []
    for raw_id, raw in payload.items():
        try:
            question_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid question id: {raw_id!r}")

        if isinstance(raw, str):
            answers.append(TextAnswer(question_id, raw))
            continue
        if not isinstance(raw, dict):
            raise ValidationError(f"Invalid answer for question {question_id}")

        kind = raw.get("type", "text")
        if kind == "text":
            answers.append(TextAnswer(question_id, str(raw.get("value") or "")))
        elif kind == "file":
            answers.append(FileAnswer(question_id, raw.get("file_ref"), raw.get("original_name")))
        else:
            raise ValidationError(f"Unknown answer type {kind!r} for question {question_id}")
    return answers


def missing_required(required_ids, answers) -> list:
    present = {a.question_id for a in answers if a.is_present()}
    return [qid for qid in required_ids if qid not in present]


class FilterQuestionProvider:
    def required_question_ids(self, infrastructure_id: int) -> list:
        raise NotImplementedError

    def question_ids(self, infrastructure_id: int):
        """All question ids of the infrastructure, or None when unknown."""
        return None


class DatabaseQuestionProvider(FilterQuestionProvider):
    def required_question_ids(self, infrastructure_id: int) -> list:
        rows = (
            InfrastructureQuestion.query
            .filter_by(infrastructure_id=infrastructure_id, is_required=True)
            .order_by(InfrastructureQuestion.id.asc())
            .all()
        )
        return [q.id for q in rows]

    def question_ids(self, infrastructure_id: int):
        rows = InfrastructureQuestion.query.filter_by(infrastructure_id=infrastructure_id).all()
        return {q.id for q in rows}


def init_question_provider(app, provider: FilterQuestionProvider = None):
    app.extensions["question_provider"] = provider or DatabaseQuestionProvider()
