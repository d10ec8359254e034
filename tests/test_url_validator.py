"""Tests for the URL validation boundary."""
import pytest

from wishmeta.utils.url_validator import (
    InputRejected,
    canonical_ipv4,
    is_blocked_host,
    strip_tracking_params,
    validate_url,
)


class TestValidateUrl:
    """Accepted URLs are normalized, everything else raises InputRejected."""

    def test_normalizes_host_and_trims(self):
        assert validate_url("  https://WWW.Example.COM/Item  ") == "https://www.example.com/Item"

    def test_empty_path_becomes_root(self):
        assert validate_url("https://example.com") == "https://example.com/"

    def test_strips_tracking_params_keeps_others(self):
        url = "https://shop.example.com/p/1?utm_source=ig&color=red&fbclid=abc&size=m"
        assert validate_url(url) == "https://shop.example.com/p/1?color=red&size=m"

    @pytest.mark.parametrize(
        "url,reason",
        [
            ("", "malformed"),
            (None, "malformed"),
            ("not a url", "malformed"),
            ("https://", "malformed"),
            ("https://example.com:99999/", "malformed"),
            ("ftp://example.com/file", "scheme"),
            ("javascript:alert(1)", "scheme"),
            ("file:///etc/passwd", "scheme"),
            ("example.com/product", "scheme"),
        ],
    )
    def test_rejects_malformed_and_non_http(self, url, reason):
        with pytest.raises(InputRejected) as exc_info:
            validate_url(url)
        assert exc_info.value.reason == reason

    @pytest.mark.parametrize(
        "url",
        [
            "http://127.0.0.1/admin",
            "http://192.168.1.1/",
            "http://10.0.0.5:8080/",
            "http://172.16.0.1/",
            "http://172.31.255.255/",
            "http://169.254.169.254/latest/meta-data/",
            "http://0.0.0.0/",
            "http://localhost:3000/",
            "http://api.localhost/",
            "http://[::1]/",
            "http://[fe80::1]/",
            "http://2130706433/admin",
            "http://0x7f000001/admin",
            "http://017700000001/admin",
            "http://127.1/",
            "http://0x7f.1/",
            "http://3232235777/",
            "http://0/",
            "http://127.0.0.1./",
            "http://999.1.1.1/",
            "http://09.0.0.1/",
        ],
    )
    def test_rejects_private_hosts(self, url):
        with pytest.raises(InputRejected) as exc_info:
            validate_url(url)
        assert exc_info.value.reason == "private_host"

    def test_rejected_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_url("gopher://example.com/")


class TestHelpers:

    @pytest.mark.parametrize(
        "host,expected",
        [
            ("172.15.0.1", False),
            ("172.32.0.1", False),
            ("8.8.8.8", False),
            ("www.amazon.es", False),
            ("10.1.2.3", True),
            ("LOCALHOST", True),
        ],
    )
    def test_is_blocked_host(self, host, expected):
        assert is_blocked_host(host) is expected

    def test_strip_tracking_params_without_query(self):
        assert strip_tracking_params("https://example.com/a") == "https://example.com/a"

    def test_product_url_passes_unchanged(self):
        url = "https://www.zara.com/es/es/camisa-p04087301.html"
        assert validate_url(url) == url

    @pytest.mark.parametrize(
        "url",
        [
            "https://shop.example.com/p/1?flag",
            "https://shop.example.com/p/1?q=a%20b&sort=price+asc",
            "https://shop.example.com/p/1?name=caf%C3%A9&empty=",
        ],
    )
    def test_query_untouched_without_tracking_params(self, url):
        assert strip_tracking_params(url) == url

    def test_only_tracking_pieces_removed(self):
        url = "https://shop.example.com/p/1?flag&utm_medium=email&q=a%20b"
        assert strip_tracking_params(url) == "https://shop.example.com/p/1?flag&q=a%20b"

    def test_all_tracking_params_drop_the_query(self):
        url = "https://shop.example.com/p/1?utm_source=ig&gclid=1"
        assert strip_tracking_params(url) == "https://shop.example.com/p/1"


class TestNumericHosts:
    """Numeric IPv4 spellings resolve like dotted quads."""

    @pytest.mark.parametrize(
        "host,expected",
        [
            ("2130706433", "127.0.0.1"),
            ("0x7f000001", "127.0.0.1"),
            ("017700000001", "127.0.0.1"),
            ("127.1", "127.0.0.1"),
            ("0x7f.0.0.1", "127.0.0.1"),
            ("192.168.257", "192.168.1.1"),
            ("134744072", "8.8.8.8"),
        ],
    )
    def test_canonical_ipv4(self, host, expected):
        assert str(canonical_ipv4(host)) == expected

    @pytest.mark.parametrize("host", ["www.amazon.es", "123.example.com", "deadbeef", "::1"])
    def test_hostnames_are_not_numeric(self, host):
        assert canonical_ipv4(host) is None

    @pytest.mark.parametrize("host", ["256.1.1.1", "4294967296", "08.1.1.1"])
    def test_unreadable_numeric_host_raises(self, host):
        with pytest.raises(ValueError):
            canonical_ipv4(host)

    def test_public_numeric_host_allowed(self):
        assert not is_blocked_host("134744072")
        assert validate_url("http://134744072/") == "http://134744072/"

    @pytest.mark.parametrize("host", ["2130706433", "0x7f000001", "017700000001", "0xa000001"])
    def test_numeric_private_hosts_blocked(self, host):
        assert is_blocked_host(host)
