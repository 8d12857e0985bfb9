#!/usr/bin/env python3
"""
Endpoint check for a running fleet simulator API.
Hits every route in a sensible order, checks status codes and response fields.
"""

from __future__ import annotations

import sys
import requests
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass


@dataclass
class EndpointTest:
    """Test case for an API endpoint."""
    method: str
    path: str
    name: str
    payload: Optional[Dict] = None
    expected_status: int = 200
    expected_fields: Optional[List[str]] = None
    validate_func: Optional[Callable[[Dict[str, Any]], bool]] = None


TESTS = [
    EndpointTest("GET", "/health", "Health", expected_fields=["status"]),
    EndpointTest(
        "POST", "/snapshot/regenerate", "Regenerate", payload={"size": 200},
        expected_fields=["generated_at", "total", "events"],
        validate_func=lambda d: d.get("total") == 200,
    ),
    EndpointTest(
        "GET", "/snapshot?sort=health_score&dir=asc&limit=10", "Snapshot (worst 10)",
        expected_fields=["nodes", "events", "kpis"],
        validate_func=lambda d: len(d.get("nodes", [])) <= 10,
    ),
    EndpointTest("GET", "/snapshot?sort=bogus", "Snapshot - bad sort key", expected_status=400),
    EndpointTest(
        "POST", "/snapshot/tick", "Tick",
        expected_fields=["new_events", "events"],
        validate_func=lambda d: len(d.get("new_events", [])) >= 1,
    ),
    EndpointTest("GET", "/events", "Events", expected_fields=["events"]),
    EndpointTest(
        "POST", "/validate", "Validate",
        expected_fields=["run_id", "checks", "summary"],
        validate_func=lambda d: len(d.get("checks", [])) == 6,
    ),
    EndpointTest("GET", "/validation/latest", "Latest validation", expected_fields=["run_id"]),
    EndpointTest("GET", "/export/nodes.csv", "Export CSV"),
    EndpointTest("GET", "/export/report.md", "Export report"),
]


def check(base_url: str, test: EndpointTest) -> Dict[str, Any]:
    url = f"{base_url}{test.path}"
    result: Dict[str, Any] = {"name": test.name, "path": test.path, "errors": [], "warnings": []}
    try:
        if test.method == "GET":
            response = requests.get(url, timeout=10)
        else:
            response = requests.post(url, json=test.payload, timeout=10)
    except requests.exceptions.RequestException as e:
        result["errors"].append(f"Request failed: {e}")
        return result

    result["status_code"] = response.status_code
    result["response_time_ms"] = response.elapsed.total_seconds() * 1000
    if response.status_code != test.expected_status:
        result["errors"].append(f"Expected status {test.expected_status}, got {response.status_code}")

    if response.headers.get("content-type", "").startswith("application/json"):
        data = response.json()
        for field in test.expected_fields or []:
            if field not in data:
                result["warnings"].append(f"Missing expected field: {field}")
        if test.validate_func and response.ok and not test.validate_func(data):
            result["warnings"].append("Custom validation failed")
    return result


def main():
    base_url = (sys.argv[1] if len(sys.argv) > 1 else "http://127.0.0.1:8080").rstrip("/")
    print("=" * 70)
    print(f"FLEET API CHECK: {base_url}")
    print("=" * 70)

    failed = 0
    for test in TESTS:
        result = check(base_url, test)
        if result["errors"]:
            failed += 1
            print(f"✗ {test.method} {test.path}: {', '.join(result['errors'])}")
        else:
            print(f"✓ {test.method} {test.path} ({result['response_time_ms']:.1f}ms)")
        for warning in result["warnings"]:
            print(f"  ⚠ {warning}")

    print(f"\nPassed: {len(TESTS) - failed}/{len(TESTS)}")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
