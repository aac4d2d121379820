"""
FinishLine
User & team domain model.

Models:
    - User: person who submits, reviews and implements change requests
    - Team: group owning projects; carries the Slack channel used for
      change-request notifications
"""

from finishline.models import db

# ── Constants ────────────────────────────────────────────────────────────────

# Ordered lowest → highest privilege. The index is the privilege tier.
ROLES = ("GUEST", "MEMBER", "LEADERSHIP", "ADMIN", "APP_ADMIN")
ROLE_TIERS = {role: tier for tier, role in enumerate(ROLES)}


class User(db.Model):
    """Application user."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(200), nullable=False, unique=True)
    email_id = db.Column(db.String(100), nullable=True, unique=True)
    google_auth_id = db.Column(db.String(255), nullable=True, unique=True)
    role = db.Column(db.String(20), nullable=False, default="GUEST",
                     comment="GUEST | MEMBER | LEADERSHIP | ADMIN | APP_ADMIN")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def tier(self) -> int:
        return ROLE_TIERS.get(self.role, 0)

    def __repr__(self):
        return f"<User {self.id}: {self.full_name} ({self.role})>"


class Team(db.Model):
    """Team that owns one or more projects."""

    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    team_name = db.Column(db.String(100), nullable=False, unique=True)
    slack_id = db.Column(db.String(50), nullable=False, comment="Slack channel id for notifications")
    leader_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True,
    )

    leader = db.relationship("User", foreign_keys=[leader_id])
    projects = db.relationship("Project", back_populates="team")

    def __repr__(self):
        return f"<Team {self.id}: {self.team_name}>"
