"""Profile model definition."""

from . import db, utcnow


GENDERS = ("male", "female")


class Profile(db.Model):
    """Optional body measurements attached one-to-one to a user."""

    __tablename__ = "profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    gender = db.Column(db.Enum(*GENDERS, name="profile_gender"), nullable=True)
    birth_date = db.Column(db.Date, nullable=True)
    height = db.Column(db.Float, nullable=True)
    weight = db.Column(db.Float, nullable=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="profile")

    def to_dict(self) -> dict:
        return {
            "gender": self.gender,
            "birthDate": self.birth_date.isoformat() if self.birth_date else None,
            "height": self.height,
            "weight": self.weight,
        }
