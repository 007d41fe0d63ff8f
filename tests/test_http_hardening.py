import os
import unittest

from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")

from docgate.core.error_handlers import install_error_handlers
from docgate.core.http_hardening import API_RESPONSE_HEADERS, install_http_hardening, request_id_from_header
from docgate.main import app
from docgate.services.query_errors import NotAStructError


class HttpHardeningTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()

    def test_health_has_security_headers_and_request_id(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        for header, value in API_RESPONSE_HEADERS.items():
            self.assertEqual(response.headers.get(header), value)

        request_id = response.headers.get("x-request-id")
        self.assertIsNotNone(request_id)
        self.assertRegex(str(request_id), r"^[A-Za-z0-9._-]{1,128}$")

    def test_valid_request_id_is_preserved(self):
        external_request_id = "release-check-2026_02_23"
        response = self.client.get("/health", headers={"X-Request-ID": external_request_id})
        self.assertEqual(response.headers.get("x-request-id"), external_request_id)

    def test_invalid_request_id_is_replaced(self):
        bad_request_id = "bad id with spaces"
        response = self.client.get("/health", headers={"X-Request-ID": bad_request_id})
        response_request_id = response.headers.get("x-request-id")
        self.assertNotEqual(response_request_id, bad_request_id)
        self.assertRegex(str(response_request_id), r"^[A-Za-z0-9._-]{1,128}$")
        self.assertEqual(len(request_id_from_header("x" * 129)), 32)

    def test_error_response_keeps_security_headers_and_request_id(self):
        response = self.client.get("/rest/v1/users/not-an-id")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.headers.get("x-content-type-options"), "nosniff")
        self.assertEqual(response.headers.get("cache-control"), "no-store")
        self.assertIsNotNone(response.headers.get("x-request-id"))

    def test_access_log_omits_query_string(self):
        with self.assertLogs("docgate.http", level="INFO") as logs:
            self.client.get("/health", params={"email": "secret@example.com"})
        self.assertTrue(any("/health" in line for line in logs.output))
        self.assertFalse(any("secret@example.com" in line for line in logs.output))

    def test_cors_preflight_for_allowed_origin(self):
        response = self.client.options(
            "/rest/v1/users",
            headers={"Origin": "http://localhost:8000", "Access-Control-Request-Method": "GET"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers.get("access-control-allow-origin"), "http://localhost:8000")

        response = self.client.options(
            "/rest/v1/users",
            headers={"Origin": "http://evil.example", "Access-Control-Request-Method": "GET"},
        )
        self.assertEqual(response.status_code, 400)


class ErrorHandlerTests(unittest.TestCase):
    def test_non_entity_type_is_a_server_error(self):
        probe = FastAPI()
        install_http_hardening(probe)
        install_error_handlers(probe)

        @probe.get("/probe")
        def _probe():
            raise NotAStructError(42)

        with TestClient(probe) as client:
            response = client.get("/probe")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "NotAStruct")
        self.assertIn("int", response.json()["detail"])


if __name__ == "__main__":
    unittest.main()
