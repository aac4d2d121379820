"""
FinishLine: change-diff builder.

Turns an (old, new) pair for one named field into audit entries ready for
``finishline.models.change.write_changes``. Four variants:

    create_change_non_list             scalar value equality
    create_change_dates                calendar-day comparison in UTC
    create_dependency_changes          id set difference, WBS numbers in text
    create_description_bullet_changes  removed / added / edited bullets

Only the dependency variant reads from the database (to print WBS numbers).

Usage:
    target = ChangeTarget(cr.id, reviewer.id, element.id)
    entry = create_change_non_list("name", element.name, body["name"], target)
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from finishline.core.exceptions import NotFoundError
from finishline.models import db
from finishline.models.wbs import WbsElement

_RFC1123 = "%a, %d %b %Y %H:%M:%S GMT"


@dataclass(frozen=True)
class ChangeTarget:
    """Who implements which change request on which WBS element."""

    change_request_id: int
    implementer_id: int
    wbs_element_id: int

    def entry(self, detail: str) -> dict:
        return {
            "change_request_id": self.change_request_id,
            "implementer_id": self.implementer_id,
            "wbs_element_id": self.wbs_element_id,
            "detail": detail,
        }


@dataclass
class BulletDiff:
    """Storage actions plus audit entries for one bulleted list.

    ``deleted_ids``, ``added_details`` and ``edited_ids_and_details`` never
    share an item.
    """

    deleted_ids: list[int] = field(default_factory=list)
    added_details: list[str] = field(default_factory=list)
    edited_ids_and_details: list[dict] = field(default_factory=list)
    changes: list[dict] = field(default_factory=list)


def build_change_detail(thing_changed: str, old_value, new_value) -> str:
    return f'Changed {thing_changed} from "{old_value}" to "{new_value}"'


# ── Scalar ───────────────────────────────────────────────────────────────────


def create_change_non_list(field_name: str, old_value, new_value, target: ChangeTarget) -> dict | None:
    """One entry when the value was added or changed, else None."""
    if old_value is None:
        return target.entry(f'Added {field_name} "{new_value}"')
    if old_value != new_value:
        return target.entry(build_change_detail(field_name, old_value, new_value))
    return None


# ── Dates ────────────────────────────────────────────────────────────────────


def _as_utc(value) -> datetime:
    if isinstance(value, datetime):
        # SQLite hands back naive datetimes; they were stored as UTC
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def create_change_dates(field_name: str, old_value, new_value, target: ChangeTarget) -> dict | None:
    """One entry when the UTC calendar days differ; time of day is ignored."""
    old_utc, new_utc = _as_utc(old_value), _as_utc(new_value)
    if old_utc.date() == new_utc.date():
        return None
    return target.entry(
        build_change_detail(field_name, old_utc.strftime(_RFC1123), new_utc.strftime(_RFC1123))
    )


# ── Dependency lists ─────────────────────────────────────────────────────────


def create_dependency_changes(
    old_ids: list[int],
    new_ids: list[int],
    target: ChangeTarget,
    field_name: str,
    session=None,
) -> list[dict]:
    """Entries for ids dropped from or added to a list of WBS element ids.

    Raises:
        NotFoundError: if a changed id has no WBS element.
    """
    old_set, new_set = set(old_ids), set(new_ids)
    changed = [(i, "Removed") for i in old_ids if i not in new_set]
    changed += [(i, "Added new") for i in new_ids if i not in old_set]
    if not changed:
        return []

    session = session or db.session
    elements = (
        session.query(WbsElement)
        .filter(WbsElement.id.in_({i for i, _ in changed}))
        .all()
    )
    wbs_strings = {e.id: e.wbs_string for e in elements}
    for element_id, _ in changed:
        if element_id not in wbs_strings:
            raise NotFoundError("WBS element", element_id)

    return [
        target.entry(f'{verb} {field_name} "{wbs_strings[element_id]}"')
        for element_id, verb in changed
    ]


# ── Description bullets ──────────────────────────────────────────────────────


def create_description_bullet_changes(
    old_bullets,
    new_bullets: list[dict],
    target: ChangeTarget,
    field_name: str,
) -> BulletDiff:
    """Diff live bullets (``.id``/``.detail``) against ``{"id", "detail"}`` dicts.

    A negative or unknown id in the new list is an addition. When an existing
    id repeats, only its first occurrence counts.
    """
    seen_old = {b.id: b.detail for b in old_bullets}
    seen_new = {b["id"] for b in new_bullets}
    matched = set()
    diff = BulletDiff()

    for bullet in old_bullets:
        if bullet.id not in seen_new:
            diff.deleted_ids.append(bullet.id)
            diff.changes.append(target.entry(f'Removed {field_name} "{bullet.detail}"'))

    for item in new_bullets:
        bullet_id, detail = item["id"], item["detail"]
        if bullet_id < 0 or bullet_id not in seen_old:
            diff.added_details.append(detail)
            diff.changes.append(target.entry(f'Added new {field_name} "{detail}"'))
            continue
        if bullet_id in matched:
            continue
        matched.add(bullet_id)
        if seen_old[bullet_id] != detail:
            diff.edited_ids_and_details.append({"id": bullet_id, "detail": detail})
            diff.changes.append(target.entry(
                build_change_detail(field_name, seen_old[bullet_id] or "null", detail or "null")
            ))
    return diff
