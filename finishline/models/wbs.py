"""
FinishLine
Work breakdown structure domain models.

Models:
    - WbsElement: addressable node keyed by (car, project, work package) numbers
    - Project: WBS element with work package number 0
    - WorkPackage: WBS element inside a project, with dependencies and bullets
    - DescriptionBullet: checkable text line (goal, feature, constraint,
      expected activity, deliverable)
"""

from datetime import datetime, timezone

from finishline.models import db


# ── Constants ────────────────────────────────────────────────────────────────

WBS_ELEMENT_STATUSES = ("INACTIVE", "ACTIVE", "COMPLETE")


# Work package → WBS element it depends on (many-to-many)
work_package_dependencies = db.Table(
    "work_package_dependencies",
    db.Column(
        "work_package_id", db.Integer,
        db.ForeignKey("work_packages.id", ondelete="CASCADE"), primary_key=True,
    ),
    db.Column(
        "wbs_element_id", db.Integer,
        db.ForeignKey("wbs_elements.id", ondelete="CASCADE"), primary_key=True,
    ),
)


# ── WBS Element ──────────────────────────────────────────────────────────────


class WbsElement(db.Model):
    """
    Common identity + status shared by projects and work packages.

    ``(car_number, project_number, work_package_number)`` is unique;
    projects use work_package_number 0.
    """

    __tablename__ = "wbs_elements"
    __table_args__ = (
        db.UniqueConstraint(
            "car_number", "project_number", "work_package_number", name="uq_wbs_number",
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    date_created = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    car_number = db.Column(db.Integer, nullable=False)
    project_number = db.Column(db.Integer, nullable=False)
    work_package_number = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(200), nullable=False)
    status = db.Column(
        db.String(20), nullable=False, default="INACTIVE",
        comment="INACTIVE | ACTIVE | COMPLETE",
    )
    project_lead_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    project_manager_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )

    # ── Relationships ────────────────────────────────────────────────────
    project_lead = db.relationship("User", foreign_keys=[project_lead_id])
    project_manager = db.relationship("User", foreign_keys=[project_manager_id])
    project = db.relationship("Project", back_populates="wbs_element", uselist=False)
    work_package = db.relationship("WorkPackage", back_populates="wbs_element", uselist=False)
    changes = db.relationship(
        "Change", back_populates="wbs_element", order_by="Change.date_implemented",
    )
    change_requests = db.relationship("ChangeRequest", back_populates="wbs_element")

    @property
    def wbs_string(self) -> str:
        return f"{self.car_number}.{self.project_number}.{self.work_package_number}"

    @property
    def is_project(self) -> bool:
        return self.work_package_number == 0

    def __repr__(self):
        return f"<WbsElement {self.id}: {self.wbs_string} {self.name}>"


# ── Project ──────────────────────────────────────────────────────────────────


class Project(db.Model):
    """Project extension of a WBS element."""

    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    wbs_element_id = db.Column(
        db.Integer, db.ForeignKey("wbs_elements.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    budget = db.Column(db.Integer, nullable=False, default=0)
    summary = db.Column(db.Text, nullable=False, default="")
    google_drive_folder_link = db.Column(db.String(500), nullable=True)
    slide_deck_link = db.Column(db.String(500), nullable=True)
    bom_link = db.Column(db.String(500), nullable=True)
    task_list_link = db.Column(db.String(500), nullable=True)
    rules = db.Column(db.JSON, nullable=False, default=list)
    team_id = db.Column(
        db.Integer, db.ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True,
    )

    # ── Relationships ────────────────────────────────────────────────────
    wbs_element = db.relationship("WbsElement", back_populates="project")
    team = db.relationship("Team", back_populates="projects")
    work_packages = db.relationship(
        "WorkPackage", back_populates="project", order_by="WorkPackage.order_in_project",
    )
    goals = db.relationship(
        "DescriptionBullet",
        foreign_keys="DescriptionBullet.project_id_goals",
        order_by="DescriptionBullet.id",
    )
    features = db.relationship(
        "DescriptionBullet",
        foreign_keys="DescriptionBullet.project_id_features",
        order_by="DescriptionBullet.id",
    )
    other_constraints = db.relationship(
        "DescriptionBullet",
        foreign_keys="DescriptionBullet.project_id_other_constraints",
        order_by="DescriptionBullet.id",
    )

    def __repr__(self):
        return f"<Project {self.id}: wbs_element={self.wbs_element_id}>"


# ── Work Package ─────────────────────────────────────────────────────────────


class WorkPackage(db.Model):
    """Work package extension of a WBS element."""

    __tablename__ = "work_packages"

    id = db.Column(db.Integer, primary_key=True)
    wbs_element_id = db.Column(
        db.Integer, db.ForeignKey("wbs_elements.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    project_id = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    order_in_project = db.Column(db.Integer, nullable=False, default=0)
    progress = db.Column(db.Integer, nullable=False, default=0, comment="0-100")
    start_date = db.Column(db.Date, nullable=False)
    duration = db.Column(db.Integer, nullable=False, default=1, comment="weeks")

    # ── Relationships ────────────────────────────────────────────────────
    wbs_element = db.relationship("WbsElement", back_populates="work_package")
    project = db.relationship("Project", back_populates="work_packages")
    dependencies = db.relationship(
        "WbsElement", secondary=work_package_dependencies, order_by="WbsElement.id",
    )
    expected_activities = db.relationship(
        "DescriptionBullet",
        foreign_keys="DescriptionBullet.work_package_id_expected_activities",
        order_by="DescriptionBullet.id",
    )
    deliverables = db.relationship(
        "DescriptionBullet",
        foreign_keys="DescriptionBullet.work_package_id_deliverables",
        order_by="DescriptionBullet.id",
    )

    def __repr__(self):
        return f"<WorkPackage {self.id}: wbs_element={self.wbs_element_id}>"


# ── Description Bullet ───────────────────────────────────────────────────────


class DescriptionBullet(db.Model):
    """
    Text line item owned by exactly one project or work package list.

    Deleting a bullet only stamps ``date_deleted``; rows are kept so the
    audit trail stays readable.
    """

    __tablename__ = "description_bullets"

    id = db.Column(db.Integer, primary_key=True)
    date_added = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    detail = db.Column(db.Text, nullable=False)
    date_deleted = db.Column(db.DateTime(timezone=True), nullable=True)
    date_time_checked = db.Column(db.DateTime(timezone=True), nullable=True)
    user_checked_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )

    # Owning list (one of)
    project_id_goals = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    project_id_features = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    project_id_other_constraints = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    work_package_id_expected_activities = db.Column(
        db.Integer, db.ForeignKey("work_packages.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    work_package_id_deliverables = db.Column(
        db.Integer, db.ForeignKey("work_packages.id", ondelete="CASCADE"), nullable=True, index=True,
    )

    user_checked = db.relationship("User", foreign_keys=[user_checked_id])

    @property
    def is_deleted(self) -> bool:
        return self.date_deleted is not None

    def __repr__(self):
        return f"<DescriptionBullet {self.id}: {self.detail[:40]}>"
