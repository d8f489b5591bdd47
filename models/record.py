"""Calculator record model definition."""

from sqlalchemy import event
from sqlalchemy.orm import object_session

from . import db, utcnow


CALCULATOR_KINDS = (
    "bmi",
    "bmr",
    "body-fat",
    "waist-hip",
    "blood-pressure",
    "target-heart-rate",
    "sli",
    "calorie",
)


class ImmutableRecordError(RuntimeError):
    """Raised when code attempts to modify a stored calculator record."""


class CalculatorRecord(db.Model):
    """One saved calculation, tagged with the calculator kind that produced it."""

    __tablename__ = "calculator_records"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind = db.Column(
        db.Enum(*CALCULATOR_KINDS, name="calculator_kind"),
        nullable=False,
        index=True,
    )
    inputs = db.Column(db.JSON, nullable=False)
    result = db.Column(db.JSON, nullable=False)
    advice = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
    )

    user = db.relationship("User", back_populates="records")

    def __repr__(self) -> str:
        return f"<CalculatorRecord id={self.id} kind={self.kind} user_id={self.user_id}>"

    def to_dict(self) -> dict:
        """Serialize the record into a dictionary."""

        return {
            "id": self.id,
            "kind": self.kind,
            "inputs": dict(self.inputs or {}),
            "result": dict(self.result or {}),
            "advice": self.advice,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@event.listens_for(CalculatorRecord, "before_update")
def _reject_record_update(mapper, connection, target) -> None:
    session = object_session(target)
    if session is not None and not session.is_modified(target, include_collections=False):
        return
    raise ImmutableRecordError(
        f"Calculator record {target.id} is immutable and cannot be updated."
    )
