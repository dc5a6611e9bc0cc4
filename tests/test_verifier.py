"""Tests for link accessibility checks."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from urllib3.exceptions import LocationParseError

from url_analyzer.config import AnalyzerConfig
from url_analyzer.models import LinkRecord, LinkType
from url_analyzer.verifier import LinkVerifier, count_inaccessible


def _link(url: str, link_type: LinkType = LinkType.EXTERNAL) -> LinkRecord:
    return LinkRecord(url=url, link_type=link_type)


def _url_of_length(length: int) -> str:
    prefix = "https://example.com/"
    return prefix + "a" * (length - len(prefix))


class TestCheck:
    @pytest.mark.parametrize(
        "status, accessible",
        [(200, True), (204, True), (301, True), (302, True), (399, True),
         (400, False), (404, False), (500, False)],
    )
    def test_status_decides_accessibility(
        self, session, make_response, status: int, accessible: bool
    ) -> None:
        session.head.return_value = make_response(status)
        checked = LinkVerifier(session=session).check(_link("https://other.org/x"))

        assert checked.status_code == status
        assert checked.is_accessible is accessible

    def test_head_request_without_following_redirects(self, session, make_response) -> None:
        session.head.return_value = make_response(200)
        config = AnalyzerConfig(link_timeout_s=4.0)
        LinkVerifier(config, session).check(_link("https://other.org/x"))

        session.head.assert_called_once_with(
            "https://other.org/x", timeout=4.0, allow_redirects=False
        )

    def test_default_link_timeout_is_ten_seconds(self, session, make_response) -> None:
        session.head.return_value = make_response(200)
        LinkVerifier(session=session).check(_link("https://other.org/x"))

        assert session.head.call_args.kwargs["timeout"] == 10.0

    @pytest.mark.parametrize(
        "exc",
        [requests.ConnectionError("refused"), requests.ReadTimeout("slow"),
         requests.TooManyRedirects("loop")],
    )
    def test_network_failure_is_inaccessible(self, session, exc: Exception) -> None:
        session.head.side_effect = exc
        checked = LinkVerifier(session=session).check(_link("https://other.org/x"))

        assert checked.status_code == 0
        assert checked.is_accessible is False

    @pytest.mark.parametrize(
        "url", ["mailto:someone@example.org", "javascript:void(0)", "ftp://files.example.org/a"]
    )
    def test_non_http_scheme_is_not_requested(self, session, url: str) -> None:
        checked = LinkVerifier(session=session).check(_link(url, LinkType.INTERNAL))

        assert checked.status_code == 0
        assert checked.is_accessible is False
        session.head.assert_not_called()

    def test_url_over_length_limit_is_not_requested(self, session) -> None:
        url = _url_of_length(2001)
        assert len(url) == 2001

        checked = LinkVerifier(session=session).check(_link(url))

        assert checked.is_accessible is False
        assert checked.status_code == 0
        session.head.assert_not_called()

    def test_url_at_length_limit_is_requested(self, session, make_response) -> None:
        url = _url_of_length(2000)
        assert len(url) == 2000
        session.head.return_value = make_response(200)

        checked = LinkVerifier(session=session).check(_link(url))

        assert checked.is_accessible is True
        session.head.assert_called_once()

    def test_check_returns_new_record(self, session, make_response) -> None:
        session.head.return_value = make_response(200)
        original = _link("https://other.org/x")
        checked = LinkVerifier(session=session).check(original)

        assert original.status_code == 0
        assert checked.url == original.url
        assert checked.link_type is original.link_type

    def test_unparsable_host_is_inaccessible(self, session) -> None:
        session.head.side_effect = LocationParseError("a..example.com")
        checked = LinkVerifier(session=session).check(_link("http://a..example.com/"))

        assert checked.status_code == 0
        assert checked.is_accessible is False

    def test_empty_host_label_without_mocked_session(self) -> None:
        """urllib3 refuses the host before any connection is attempted."""
        checked = LinkVerifier().check(_link("http://a..example.com/"))

        assert checked.status_code == 0
        assert checked.is_accessible is False


class TestVerify:
    def test_preserves_order_with_parallel_checks(self, session, make_response) -> None:
        statuses = {f"https://h{i}.example.org/": 200 if i % 3 else 404 for i in range(20)}
        session.head.side_effect = lambda url, **kwargs: make_response(statuses[url])
        links = [_link(url) for url in statuses]

        verified = LinkVerifier(AnalyzerConfig(max_workers=5), session).verify(links)

        assert [link.url for link in verified] == list(statuses)
        assert [link.status_code for link in verified] == list(statuses.values())
        assert session.head.call_count == 20

    def test_each_link_checked_once(self, session, make_response) -> None:
        session.head.return_value = make_response(200)
        links = [_link("https://a.example.org/"), _link("https://a.example.org/")]

        verified = LinkVerifier(session=session).verify(links)

        assert len(verified) == 2
        assert session.head.call_count == 2

    def test_mixed_results_and_count(self, session, make_response) -> None:
        def head(url, **kwargs):
            if "down" in url:
                raise requests.ConnectionError("refused")
            return make_response(404 if "missing" in url else 200)

        session.head.side_effect = head
        links = [
            _link("https://ok.example.org/"),
            _link("https://down.example.org/"),
            _link("https://ok.example.org/missing"),
            _link("mailto:a@b.c", LinkType.INTERNAL),
        ]

        verified = LinkVerifier(session=session).verify(links)

        assert [link.is_accessible for link in verified] == [True, False, False, False]
        assert [link.status_code for link in verified] == [200, 0, 404, 0]
        assert count_inaccessible(verified) == 3

    def test_empty_list(self, session) -> None:
        assert LinkVerifier(session=session).verify([]) == []
        session.head.assert_not_called()

    def test_verbose_prints_each_link(self, session, make_response, capsys) -> None:
        session.head.return_value = make_response(404)
        LinkVerifier(session=session, verbose=True).verify([_link("https://other.org/x")])

        err = capsys.readouterr().err
        assert "404 https://other.org/x" in err

    def test_bad_host_does_not_abort_the_batch(self, session, make_response) -> None:
        def head(url, **kwargs):
            if ".." in url:
                raise LocationParseError("a..example.com")
            return make_response(200)

        session.head.side_effect = head
        links = [_link("https://ok.example.org/"), _link("http://a..example.com/"), _link("https://ok.example.org/b")]

        verified = LinkVerifier(AnalyzerConfig(max_workers=3), session).verify(links)

        assert [link.status_code for link in verified] == [200, 0, 200]
        assert count_inaccessible(verified) == 1


class TestSessions:
    def test_each_worker_gets_its_own_session(self, make_response) -> None:
        created = []

        def build(config):
            worker_session = MagicMock(spec=requests.Session)
            worker_session.head.return_value = make_response(200)
            created.append(worker_session)
            return worker_session

        links = [_link(f"https://h{i}.example.org/") for i in range(12)]
        with patch("url_analyzer.verifier.build_session", side_effect=build):
            verified = LinkVerifier(AnalyzerConfig(max_workers=3)).verify(links)

        assert all(link.is_accessible for link in verified)
        assert 1 <= len(created) <= 3
        assert sum(s.head.call_count for s in created) == 12
        for worker_session in created:
            worker_session.close.assert_called_once()

    def test_explicit_session_is_shared_and_left_open(self, session, make_response) -> None:
        session.head.return_value = make_response(200)
        links = [_link(f"https://h{i}.example.org/") for i in range(4)]

        with patch("url_analyzer.verifier.build_session") as build:
            LinkVerifier(AnalyzerConfig(max_workers=4), session).verify(links)

        build.assert_not_called()
        assert session.head.call_count == 4
        session.close.assert_not_called()
