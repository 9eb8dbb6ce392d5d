#!/usr/bin/env python3
"""
Smoke test for a running rehab center API.

Logs in with each default account (see ``manage.py ensure_default_users``)
and checks that every endpoint answers with the status the role table
promises: 200 where the role may read, 403 where it may not.
"""
import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import requests

BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
PASSWORD = os.getenv("API_TEST_PASSWORD", "ChangeMe!2024")

TEST_USERS = {
    "admin": "admin",
    "doctor": "doctor1",
    "nurse": "nurse1",
    "receptionist": "reception1",
    "accountant": "accountant1",
}

# (endpoint, roles allowed to GET it); admin is allowed everywhere
READ_MATRIX: List[Tuple[str, Tuple[str, ...]]] = [
    ("/api/auth/me", ("doctor", "nurse", "receptionist", "accountant")),
    ("/api/patients", ("doctor", "nurse", "receptionist", "accountant")),
    ("/api/patients/active", ("doctor", "nurse", "receptionist", "accountant")),
    ("/api/payments", ("receptionist", "accountant")),
    ("/api/staff", ("doctor", "nurse", "accountant")),
    ("/api/staff/active", ("doctor", "nurse", "accountant")),
    ("/api/payrolls", ("accountant",)),
    ("/api/bonuses", ("accountant",)),
    ("/api/advances", ("accountant",)),
    ("/api/deductions", ("accountant",)),
    ("/api/graduates", ("doctor", "nurse", "receptionist", "accountant")),
    ("/api/cigarettes/stats", ("doctor", "nurse", "receptionist", "accountant")),
    ("/api/cigarettes/payments", ("receptionist", "accountant")),
    ("/api/expenses", ("receptionist", "accountant")),
    ("/api/users", ()),
    ("/api/dashboard/stats", ("doctor", "receptionist", "accountant")),
    ("/api/reports/summary", ("doctor", "accountant")),
    ("/api/settings", ("doctor", "nurse", "receptionist", "accountant")),
]


@dataclass
class TestResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    user_role: str = ""


class UnifiedAPITester:
    def __init__(self):
        self.session = requests.Session()
        self.headers: Dict[str, str] = {}
        self.current_role: Optional[str] = None
        self.test_results: List[TestResult] = []
        self.error_results: List[TestResult] = []

    def record(self, result: TestResult) -> TestResult:
        self.test_results.append(result)
        if not result.success:
            self.error_results.append(result)
        mark = "✅" if result.success else "❌"
        print(f"{mark} [{result.user_role}] {result.method} {result.endpoint} -> {result.status_code}"
              f" ({result.response_time:.2f}s) {result.error_message[:100]}")
        return result

    def login(self, role: str) -> bool:
        username = TEST_USERS[role]
        start = time.time()
        try:
            response = self.session.post(f"{BASE_URL}/api/auth/login",
                                         json={"username": username, "password": PASSWORD})
        except requests.RequestException as e:
            self.record(TestResult(False, "/api/auth/login", "POST", 0, 0, str(e), role))
            return False
        ok = response.status_code == 200
        if ok:
            self.headers = {"Authorization": f"Token {response.json()['token']}"}
            self.current_role = role
        self.record(TestResult(ok, "/api/auth/login", "POST", response.status_code, time.time() - start,
                               "" if ok else response.text[:200], role))
        return ok

    def test_endpoint(self, method: str, endpoint: str, data: Optional[Dict] = None,
                      expected_status: int = 200) -> TestResult:
        start = time.time()
        try:
            response = self.session.request(method, f"{BASE_URL}{endpoint}", json=data, headers=self.headers)
        except requests.RequestException as e:
            return self.record(TestResult(False, endpoint, method, 0, time.time() - start, str(e),
                                          self.current_role or ""))
        ok = response.status_code == expected_status
        message = "" if ok else f"expected {expected_status}: {response.text[:200]}"
        return self.record(TestResult(ok, endpoint, method, response.status_code, time.time() - start,
                                      message, self.current_role or ""))

    def test_all_apis_for_role(self, role: str):
        if not self.login(role):
            return
        for endpoint, allowed in READ_MATRIX:
            expected = 200 if role == "admin" or role in allowed else 403
            self.test_endpoint("GET", endpoint, expected_status=expected)
        if role != "admin":
            self.test_endpoint("POST", "/api/database/backup", expected_status=403)
        self.test_endpoint("POST", "/api/auth/logout", {})
        self.test_endpoint("GET", "/api/auth/me", expected_status=401)

    def run_comprehensive_test(self) -> bool:
        print(f"Rehab center API smoke test against {BASE_URL}")
        print("=" * 60)
        self.current_role = "anonymous"
        self.test_endpoint("GET", "/healthz")
        self.test_endpoint("GET", "/api/patients", expected_status=401)
        for role in TEST_USERS:
            self.test_all_apis_for_role(role)
            self.session = requests.Session()
            self.headers = {}
            self.current_role = None
        self.generate_reports()
        return not self.error_results

    def generate_reports(self):
        total = len(self.test_results)
        passed = total - len(self.error_results)
        rate = (passed / total) * 100 if total else 0
        print(f"\nSummary ({datetime.now().isoformat(timespec='seconds')}):")
        print(f"  total: {total}  passed: {passed}  failed: {len(self.error_results)}  rate: {rate:.1f}%")
        for i, error in enumerate(self.error_results, 1):
            print(f"{i}. [{error.user_role}] {error.method} {error.endpoint} {error.status_code}")
            print(f"   {error.error_message}")


def main():
    tester = UnifiedAPITester()
    if tester.run_comprehensive_test():
        print("\n✅ all endpoints answered as expected")
        sys.exit(0)
    print(f"\n⚠️  {len(tester.error_results)} unexpected answer(s)")
    sys.exit(1)


if __name__ == "__main__":
    main()
