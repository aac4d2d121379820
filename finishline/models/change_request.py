"""
FinishLine
Change request domain models.

Models:
    - ChangeRequest: proposal to modify a WBS element; reviewed exactly once
    - ActivationChangeRequest: ACTIVATION extension (lead, manager, start date)
    - StageGateChangeRequest: STAGE_GATE extension (leftover budget)
    - ScopeChangeRequest: extension for the standard types
      (DEFINITION_CHANGE | ISSUE | OTHER)
    - ChangeRequestExplanation: "why" line of a scope change request
    - ProposedSolution: candidate solution for a scope change request
"""

from datetime import datetime, timezone

from finishline.models import db


# ── Constants ────────────────────────────────────────────────────────────────

CR_TYPE_ACTIVATION = "ACTIVATION"
CR_TYPE_STAGE_GATE = "STAGE_GATE"
STANDARD_CR_TYPES = ("DEFINITION_CHANGE", "ISSUE", "OTHER")
CR_TYPES = (CR_TYPE_ACTIVATION, CR_TYPE_STAGE_GATE) + STANDARD_CR_TYPES

CR_WHY_TYPES = (
    "ESTIMATION", "SCHOOL", "MANUFACTURING", "RULES", "OTHER_PROJECT", "OTHER", "DESIGN",
)


class ChangeRequest(db.Model):
    """
    Change request submitted against a WBS element.

    ``accepted`` is NULL while pending and becomes True/False exactly once
    on review.
    """

    __tablename__ = "change_requests"

    id = db.Column(db.Integer, primary_key=True)
    submitter_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    date_submitted = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    wbs_element_id = db.Column(
        db.Integer, db.ForeignKey("wbs_elements.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    type = db.Column(
        db.String(30), nullable=False,
        comment="ACTIVATION | STAGE_GATE | DEFINITION_CHANGE | ISSUE | OTHER",
    )
    reviewer_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    review_notes = db.Column(db.Text, nullable=True)
    accepted = db.Column(db.Boolean, nullable=True)
    date_reviewed = db.Column(db.DateTime(timezone=True), nullable=True)

    # ── Relationships ────────────────────────────────────────────────────
    submitter = db.relationship("User", foreign_keys=[submitter_id])
    reviewer = db.relationship("User", foreign_keys=[reviewer_id])
    wbs_element = db.relationship("WbsElement", back_populates="change_requests")
    changes = db.relationship(
        "Change", back_populates="change_request", order_by="Change.date_implemented",
    )
    activation_change_request = db.relationship(
        "ActivationChangeRequest", back_populates="change_request",
        uselist=False, cascade="all, delete-orphan",
    )
    stage_gate_change_request = db.relationship(
        "StageGateChangeRequest", back_populates="change_request",
        uselist=False, cascade="all, delete-orphan",
    )
    scope_change_request = db.relationship(
        "ScopeChangeRequest", back_populates="change_request",
        uselist=False, cascade="all, delete-orphan",
    )

    @property
    def is_pending(self) -> bool:
        return self.accepted is None

    def __repr__(self):
        return f"<ChangeRequest {self.id}: {self.type} accepted={self.accepted}>"


class ActivationChangeRequest(db.Model):
    """Proposed lead / manager / start date applied when the CR is accepted."""

    __tablename__ = "activation_change_requests"

    id = db.Column(db.Integer, primary_key=True)
    change_request_id = db.Column(
        db.Integer, db.ForeignKey("change_requests.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    project_lead_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False,
    )
    project_manager_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False,
    )
    start_date = db.Column(db.Date, nullable=False)
    confirm_details = db.Column(db.Boolean, nullable=False, default=False)

    change_request = db.relationship("ChangeRequest", back_populates="activation_change_request")
    project_lead = db.relationship("User", foreign_keys=[project_lead_id])
    project_manager = db.relationship("User", foreign_keys=[project_manager_id])


class StageGateChangeRequest(db.Model):
    """Leftover budget reported when closing out a WBS element."""

    __tablename__ = "stage_gate_change_requests"

    id = db.Column(db.Integer, primary_key=True)
    change_request_id = db.Column(
        db.Integer, db.ForeignKey("change_requests.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    leftover_budget = db.Column(db.Integer, nullable=False, default=0)
    confirm_done = db.Column(db.Boolean, nullable=False, default=False)

    change_request = db.relationship("ChangeRequest", back_populates="stage_gate_change_request")


class ScopeChangeRequest(db.Model):
    """Scope extension of a standard change request."""

    __tablename__ = "scope_change_requests"

    id = db.Column(db.Integer, primary_key=True)
    change_request_id = db.Column(
        db.Integer, db.ForeignKey("change_requests.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    what = db.Column(db.Text, nullable=False)
    scope_impact = db.Column(db.Text, nullable=False, default="")
    timeline_impact = db.Column(db.Integer, nullable=False, default=0, comment="weeks")
    budget_impact = db.Column(db.Integer, nullable=False, default=0, comment="dollars")

    change_request = db.relationship("ChangeRequest", back_populates="scope_change_request")
    why = db.relationship(
        "ChangeRequestExplanation", back_populates="scope_change_request",
        cascade="all, delete-orphan", order_by="ChangeRequestExplanation.id",
    )
    proposed_solutions = db.relationship(
        "ProposedSolution", back_populates="scope_change_request",
        cascade="all, delete-orphan", order_by="ProposedSolution.id",
    )


class ChangeRequestExplanation(db.Model):
    """One reason behind a scope change request."""

    __tablename__ = "change_request_explanations"

    id = db.Column(db.Integer, primary_key=True)
    scope_change_request_id = db.Column(
        db.Integer, db.ForeignKey("scope_change_requests.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    type = db.Column(db.String(30), nullable=False, comment="ESTIMATION | SCHOOL | ...")
    explain = db.Column(db.Text, nullable=False)

    scope_change_request = db.relationship("ScopeChangeRequest", back_populates="why")


class ProposedSolution(db.Model):
    """
    Candidate solution for a scope change request.

    ``approved`` flips to True only when the parent CR is accepted with
    this solution selected.
    """

    __tablename__ = "proposed_solutions"

    id = db.Column(db.Integer, primary_key=True)
    scope_change_request_id = db.Column(
        db.Integer, db.ForeignKey("scope_change_requests.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    description = db.Column(db.Text, nullable=False)
    scope_impact = db.Column(db.Text, nullable=False)
    timeline_impact = db.Column(db.Integer, nullable=False, default=0, comment="weeks")
    budget_impact = db.Column(db.Integer, nullable=False, default=0, comment="dollars")
    approved = db.Column(db.Boolean, nullable=False, default=False)
    created_by_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False,
    )
    date_created = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    scope_change_request = db.relationship("ScopeChangeRequest", back_populates="proposed_solutions")
    created_by = db.relationship("User", foreign_keys=[created_by_id])
