"""
FinishLine
Change domain model.

Models:
    - Change: immutable, append-only audit line written when an accepted
      change request is implemented.
"""

from datetime import datetime, timezone

from finishline.models import db


class Change(db.Model):
    """
    One human-readable field mutation caused by a change request.

    Rows are only ever inserted; nothing updates or deletes them.
    """

    __tablename__ = "changes"
    __table_args__ = (
        db.Index("idx_change_cr", "change_request_id"),
        db.Index("idx_change_wbs", "wbs_element_id"),
    )

    id = db.Column(db.Integer, primary_key=True)
    change_request_id = db.Column(
        db.Integer, db.ForeignKey("change_requests.id", ondelete="CASCADE"), nullable=False,
    )
    date_implemented = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    implementer_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False,
    )
    wbs_element_id = db.Column(
        db.Integer, db.ForeignKey("wbs_elements.id", ondelete="CASCADE"), nullable=False,
    )
    detail = db.Column(db.Text, nullable=False)

    change_request = db.relationship("ChangeRequest", back_populates="changes")
    implementer = db.relationship("User", foreign_keys=[implementer_id])
    wbs_element = db.relationship("WbsElement", back_populates="changes")

    def __repr__(self):
        return f"<Change {self.id}: CR #{self.change_request_id} {self.detail[:40]}>"


# ── Convenience writer ───────────────────────────────────────────────────────

def write_changes(changes: list[dict], session=None) -> list[Change]:
    """
    Append audit rows built by the change-diff builder.

    Each dict carries ``change_request_id``, ``implementer_id``,
    ``wbs_element_id`` and ``detail``. Uses ``flush`` so callers keep
    transaction control.
    """
    session = session or db.session
    rows = [Change(**change) for change in changes]
    session.add_all(rows)
    session.flush()
    return rows
