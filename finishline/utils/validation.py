"""Request-body validation.

Collects every violated rule for a JSON body before any service call, so the
client gets the full list in one 400 response.

Usage::

    v = RequestValidator(request.get_json(silent=True))
    v.int_min("crId")
    v.boolean("accepted")
    v.one_of("type", CR_TYPES)
    v.raise_if_invalid()          # ValidationError listing all violations
"""

from finishline.core.exceptions import ValidationError
from finishline.utils.helpers import parse_date

_MISSING = object()


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class RequestValidator:
    """Accumulates ``{"param", "msg", "value"}`` errors for one request body."""

    def __init__(self, data):
        self.data = data if isinstance(data, dict) else {}
        self.errors: list[dict] = []

    # ── internals ────────────────────────────────────────────────────────

    def _get(self, param: str, source: dict | None = None):
        source = self.data if source is None else source
        return source.get(param, _MISSING) if isinstance(source, dict) else _MISSING

    def _fail(self, param: str, msg: str, value=None):
        self.errors.append({
            "param": param,
            "msg": msg,
            "value": None if value is _MISSING else value,
            "location": "body",
        })

    def _skip(self, value, optional: bool) -> bool:
        return optional and (value is _MISSING or value is None)

    # ── rules ────────────────────────────────────────────────────────────

    def int_min(self, param: str, minimum: int = 0, *, optional: bool = False, source=None, label=None):
        value = self._get(param, source)
        if self._skip(value, optional):
            return
        if not _is_int(value) or value < minimum:
            self._fail(label or param, f"must be an integer >= {minimum}", value)

    def integer(self, param: str, *, source=None, label=None):
        value = self._get(param, source)
        if not _is_int(value):
            self._fail(label or param, "must be an integer", value)

    def boolean(self, param: str, *, optional: bool = False):
        value = self._get(param)
        if self._skip(value, optional):
            return
        if not isinstance(value, bool):
            self._fail(param, "must be a boolean", value)

    def string(self, param: str, *, optional: bool = False):
        value = self._get(param)
        if self._skip(value, optional):
            return
        if not isinstance(value, str):
            self._fail(param, "must be a string", value)

    def non_empty_string(self, param: str, *, source=None, label=None):
        value = self._get(param, source)
        if not isinstance(value, str) or not value.strip():
            self._fail(label or param, "must be a non-empty string", value)

    def one_of(self, param: str, allowed, *, source=None, label=None):
        value = self._get(param, source)
        if value not in allowed:
            self._fail(label or param, f"must be one of {list(allowed)}", value)

    def date(self, param: str):
        value = self._get(param)
        if not isinstance(value, str) or parse_date(value) is None:
            self._fail(param, "must be a date", value)

    def wbs_num(self, param: str, *, source=None, label=None):
        label = label or param
        value = self._get(param, source)
        if not isinstance(value, dict):
            self._fail(label, "must be a WBS number object", value)
            return
        for part in ("carNumber", "projectNumber", "workPackageNumber"):
            self.int_min(part, 0, source=value, label=f"{label}.{part}")

    def array(self, param: str) -> list | None:
        value = self._get(param)
        if not isinstance(value, list):
            self._fail(param, "must be an array", value)
            return None
        return value

    def bullet_list(self, param: str, *, min_id: int | None = None):
        """List of ``{id, detail}``; negative ids mark not-yet-persisted bullets.

        A stored (positive) id may appear only once. ``min_id`` rejects smaller ids.
        """
        items = self.array(param)
        seen = set()
        for i, item in enumerate(items or []):
            label = f"{param}[{i}].id"
            if min_id is None:
                self.integer("id", source=item, label=label)
            else:
                self.int_min("id", min_id, source=item, label=label)
            self.non_empty_string("detail", source=item, label=f"{param}[{i}].detail")

            bullet_id = self._get("id", item)
            if _is_int(bullet_id) and bullet_id > 0:
                if bullet_id in seen:
                    self._fail(label, "duplicate bullet id", bullet_id)
                seen.add(bullet_id)

    def string_list(self, param: str):
        items = self.array(param)
        for i, item in enumerate(items or []):
            if not isinstance(item, str):
                self._fail(f"{param}[{i}]", "must be a string", item)

    def wbs_num_list(self, param: str):
        items = self.array(param)
        for i, item in enumerate(items or []):
            self.wbs_num(str(i), source={str(i): item}, label=f"{param}[{i}]")

    # ── result ───────────────────────────────────────────────────────────

    def raise_if_invalid(self):
        if self.errors:
            raise ValidationError(self.errors)
