"""
Tests for get_client_ip in utils/network.py
"""

import pytest

from utils.network import get_client_ip


class TestGetClientIp:
    def test_first_forwarded_address_wins(self, make_request):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "X-Real-IP": "198.51.100.2"})
        assert get_client_ip(request) == "203.0.113.7"

    def test_real_ip_before_cloudflare(self, make_request):
        request = make_request({"X-Real-IP": "198.51.100.2", "CF-Connecting-IP": "192.0.2.4"})
        assert get_client_ip(request) == "198.51.100.2"

    def test_cloudflare_header(self, make_request):
        assert get_client_ip(make_request({"CF-Connecting-IP": "192.0.2.4"})) == "192.0.2.4"

    def test_falls_back_to_peer_address(self, make_request):
        assert get_client_ip(make_request()) == "10.0.0.9"

    @pytest.mark.parametrize("headers", [{}, {"X-Forwarded-For": " "}])
    def test_unknown_without_any_address(self, make_request, headers):
        assert get_client_ip(make_request(headers, client=None)) == "unknown"
