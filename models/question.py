from models.db import db


class InfrastructureQuestion(db.Model):
    __tablename__ = "infrastructure_questions"

    id = db.Column(db.Integer, primary_key=True)
    infrastructure_id = db.Column(db.Integer, db.ForeignKey("infrastructures.id"), nullable=False, index=True)
    question_text = db.Column(db.Text, nullable=False)
    question_type = db.Column(db.String(20), nullable=False, default="text")  # text, number, dropdown, document
    is_required = db.Column(db.Boolean, default=False, nullable=False)


class BookingAnswer(db.Model):
    __tablename__ = "booking_answers"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("slots.id"), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey("infrastructure_questions.id"), nullable=False)

    # text answers keep their value here, file answers the original file name
    answer_text = db.Column(db.Text, nullable=True)
    document_path = db.Column(db.String(512), nullable=True)

    booking = db.relationship("Slot", back_populates="answers")

    __table_args__ = (
        db.UniqueConstraint("booking_id", "question_id", name="uq_booking_answer_once"),
    )

    def to_dict(self):
        return {
            "question_id": self.question_id,
            "type": "file" if self.document_path else "text",
            "answer_text": self.answer_text,
            "document_path": self.document_path,
        }
