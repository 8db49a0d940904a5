import hashlib
import re
import unittest

from flask import Flask, request

from stateflare.visitor import (
    UNKNOWN,
    client_address,
    client_user_agent,
    request_visitor_hash,
    visitor_hash,
)

HEX64 = re.compile(r"^[0-9a-f]{64}$")


class VisitorHashTestCase(unittest.TestCase):
    def test_same_input_same_hash(self):
        self.assertEqual(visitor_hash("192.168.1.1", "Mozilla/5.0"), visitor_hash("192.168.1.1", "Mozilla/5.0"))

    def test_different_address_different_hash(self):
        self.assertNotEqual(visitor_hash("192.168.1.1", "Mozilla/5.0"), visitor_hash("192.168.1.2", "Mozilla/5.0"))

    def test_different_agent_different_hash(self):
        self.assertNotEqual(visitor_hash("192.168.1.1", "Mozilla/5.0"), visitor_hash("192.168.1.1", "Chrome/90.0"))

    def test_is_64_lowercase_hex(self):
        self.assertRegex(visitor_hash("192.168.1.1", "Mozilla/5.0"), HEX64)

    def test_is_sha256_of_address_and_agent(self):
        expected = hashlib.sha256(b"10.0.0.1:curl/8.0").hexdigest()
        self.assertEqual(visitor_hash("10.0.0.1", "curl/8.0"), expected)

    def test_missing_values_use_sentinel(self):
        expected = visitor_hash(UNKNOWN, UNKNOWN)
        self.assertEqual(visitor_hash(None, None), expected)
        self.assertEqual(visitor_hash("", "  "), expected)
        self.assertRegex(expected, HEX64)

    def test_hash_does_not_contain_raw_inputs(self):
        digest = visitor_hash("203.0.113.9", "Mozilla/5.0")
        self.assertNotIn("203.0.113.9", digest)
        self.assertNotIn("Mozilla", digest)


class RequestVisitorTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = Flask(__name__)

    def _context(self, headers=None, remote_addr="198.51.100.7"):
        return self.app.test_request_context(
            "/track",
            method="POST",
            headers=headers or {},
            environ_base={"REMOTE_ADDR": remote_addr},
        )

    def test_prefers_cloudflare_header(self):
        headers = {"CF-Connecting-IP": "203.0.113.1", "X-Forwarded-For": "203.0.113.2"}
        with self._context(headers):
            self.assertEqual(client_address(request), "203.0.113.1")

    def test_uses_first_forwarded_for_entry(self):
        with self._context({"X-Forwarded-For": "203.0.113.5, 10.0.0.1"}):
            self.assertEqual(client_address(request), "203.0.113.5")

    def test_uses_real_ip_header(self):
        with self._context({"X-Real-IP": "203.0.113.8"}):
            self.assertEqual(client_address(request), "203.0.113.8")

    def test_falls_back_to_socket_address(self):
        with self._context():
            self.assertEqual(client_address(request), "198.51.100.7")

    def test_ignores_forwarded_headers_when_not_trusted(self):
        with self._context({"X-Forwarded-For": "203.0.113.5"}):
            self.assertEqual(client_address(request, trust_forwarded=False), "198.51.100.7")

    def test_missing_user_agent_is_unknown(self):
        with self._context():
            self.assertEqual(client_user_agent(request), UNKNOWN)

    def test_request_hash_matches_direct_hash(self):
        headers = {"X-Forwarded-For": "203.0.113.5", "User-Agent": "Mozilla/5.0"}
        with self._context(headers):
            self.assertEqual(request_visitor_hash(request), visitor_hash("203.0.113.5", "Mozilla/5.0"))


if __name__ == "__main__":
    unittest.main()
