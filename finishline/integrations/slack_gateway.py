"""
Slack Web API gateway.

All outbound HTTP to Slack goes through this class. Services never call
``requests`` directly.

  - Bot token passed per call (read from app config by the caller)
  - Timeout: 10 s
  - One retry on HTTP 429 / 5xx, honouring ``Retry-After`` up to 5 s
  - Structured ``GatewayResult``; the gateway never raises

Slack answers HTTP 200 with ``{"ok": false, "error": "..."}`` for most API
failures, so ``ok`` is taken from the body, not the status code.

Testability: pass a mock ``session`` to SlackGateway() in tests.
"""

from __future__ import annotations

import logging
import time

import requests

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"

_DEFAULT_TIMEOUT = 10
_RETRY_MAX = 1
_RETRY_AFTER_CAP_SECONDS = 5


def _retry_after_seconds(value) -> int:
    """Delay-seconds form of ``Retry-After``, capped; anything else (HTTP dates) waits 1 s."""
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return 1
    return max(0, min(seconds, _RETRY_AFTER_CAP_SECONDS))


class GatewayResult:
    """Structured return value from SlackGateway calls.

    Attributes:
        ok:          True if Slack accepted the call.
        status_code: HTTP status code (None on network failure).
        data:        Parsed JSON body, else None.
        error:       Slack error code or network error text.
        duration_ms: Round-trip latency of the last attempt.
    """

    def __init__(self, ok: bool, status_code: int | None, data: dict | None,
                 error: str | None, duration_ms: int) -> None:
        self.ok = ok
        self.status_code = status_code
        self.data = data
        self.error = error
        self.duration_ms = duration_ms

    def __repr__(self):
        return f"<GatewayResult ok={self.ok} status={self.status_code} error={self.error}>"


class SlackGateway:
    """Thin client for ``chat.postMessage``.

    Usage:
        from finishline.integrations.slack_gateway import slack_gateway
        result = slack_gateway.post_message(token, "C0123", "hello")
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session: requests.Session | None = session

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def post_message(
        self,
        token: str,
        channel: str,
        text: str,
        *,
        blocks: list[dict] | None = None,
        timeout: int = _DEFAULT_TIMEOUT,
    ) -> GatewayResult:
        """Post ``text`` (and optional Block Kit ``blocks``) to ``channel``."""
        payload: dict = {"channel": channel, "text": text}
        if blocks:
            payload["blocks"] = blocks
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        return self._call("chat.postMessage", payload, headers, timeout)

    def _call(self, method: str, payload: dict, headers: dict, timeout: int) -> GatewayResult:
        url = f"{SLACK_API_URL}/{method}"
        last = GatewayResult(False, None, None, "not attempted", 0)

        for attempt in range(_RETRY_MAX + 1):
            t0 = time.perf_counter()
            try:
                resp = self.session.post(url, json=payload, headers=headers, timeout=timeout)
            except requests.Timeout:
                last = GatewayResult(False, None, None, f"timed out after {timeout}s", timeout * 1000)
                logger.warning("Slack %s timed out attempt=%d", method, attempt + 1)
                continue
            except requests.RequestException as exc:
                last = GatewayResult(False, None, None, str(exc)[:500], 0)
                logger.warning("Slack %s network error attempt=%d error=%s", method, attempt + 1, last.error)
                continue
            duration_ms = int((time.perf_counter() - t0) * 1000)

            if resp.status_code == 429 or resp.status_code >= 500:
                last = GatewayResult(False, resp.status_code, None, f"HTTP {resp.status_code}", duration_ms)
                logger.warning("Slack %s HTTP %d attempt=%d", method, resp.status_code, attempt + 1)
                if attempt < _RETRY_MAX:
                    time.sleep(_retry_after_seconds(resp.headers.get("Retry-After")))
                continue

            try:
                data = resp.json()
            except ValueError:
                data = {}
            if resp.ok and data.get("ok"):
                return GatewayResult(True, resp.status_code, data, None, duration_ms)
            error = data.get("error") or f"HTTP {resp.status_code}"
            logger.warning("Slack %s rejected: %s", method, error, extra={"channel": payload.get("channel")})
            return GatewayResult(False, resp.status_code, data, error, duration_ms)

        return last


# Module-level singleton
slack_gateway = SlackGateway()
