"""Post-deploy smoke checks executed from the app container."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from datetime import UTC, datetime, timedelta
from uuid import uuid4

BASE_URL = "http://localhost:8000"


def request(
    path: str,
    *,
    method: str = "GET",
    body: dict[str, object] | None = None,
    expected: int = 200,
) -> bytes:
    payload = None
    req_headers = {"Accept": "application/json"}
    if body is not None:
        payload = json.dumps(body).encode("utf-8")
        req_headers["Content-Type"] = "application/json"

    request_obj = urllib.request.Request(
        f"{BASE_URL}{path}",
        data=payload,
        method=method,
        headers=req_headers,
    )
    try:
        with urllib.request.urlopen(request_obj, timeout=30) as response:
            content = response.read()
            status = response.getcode()
    except urllib.error.HTTPError as exc:  # pragma: no cover - runtime smoke script
        body_text = exc.read().decode("utf-8", errors="ignore")
        raise RuntimeError(f"{method} {path} -> {exc.code}: {body_text}") from exc

    if status != expected:
        raise RuntimeError(f"{method} {path} -> {status}, expected {expected}")
    return content


def main() -> None:
    for endpoint in ["/health", "/ready", "/docs", "/metrics"]:
        request(endpoint, expected=200)

    start_time = datetime.now(UTC) + timedelta(days=7)
    created = json.loads(
        request(
            "/api/v1/lesson-requests",
            method="POST",
            body={
                "student_id": str(uuid4()),
                "lesson_type": "GUITAR",
                "start_time": start_time.isoformat(),
                "duration_minutes": 60,
                "address_id": str(uuid4()),
            },
            expected=201,
        ).decode("utf-8")
    )
    request(f"/api/v1/lesson-requests/{created['id']}", expected=200)
    request(f"/api/v1/lesson-requests/{created['id']}/quotes", expected=200)

    print("Smoke checks passed.")


if __name__ == "__main__":
    main()
