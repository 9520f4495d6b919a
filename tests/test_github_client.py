"""Tests for the GitHub search client and its error mapping."""

import pytest
import requests
from unittest.mock import patch

from pr_audit.domain.errors import NoPullRequestsFound
from pr_audit.infrastructure.github_client import (
    GitHubFetchError,
    GitHubSearchClient,
    InvalidUsername,
    RateLimitExceeded,
    parse_timestamp,
    repository_from_url,
)

REQUESTS_GET = "pr_audit.infrastructure.github_client.requests.get"


@pytest.fixture
def client():
    return GitHubSearchClient(token="fake_github_token", per_page=100)


class TestSearchQuery:

    def test_unscoped_query(self):
        assert GitHubSearchClient.build_search_query("octocat") == (
            "author:octocat type:pr is:public is:merged"
        )

    def test_org_scoped_query(self):
        assert GitHubSearchClient.build_search_query("octocat", "MetaMask") == (
            "author:octocat org:MetaMask type:pr is:public is:merged"
        )

    def test_request_parameters_and_headers(self, client, response, search_item):
        with patch(REQUESTS_GET, return_value=response(body={"items": [search_item(1)]})) as mock_get:
            client.search_pull_requests("octocat")

        args, kwargs = mock_get.call_args
        assert args[0] == "https://api.github.com/search/issues"
        assert kwargs["params"] == {
            "q": "author:octocat type:pr is:public is:merged",
            "sort": "updated",
            "order": "desc",
            "per_page": 100,
        }
        assert kwargs["headers"]["Authorization"] == "Bearer fake_github_token"
        assert kwargs["headers"]["Accept"] == "application/vnd.github+json"
        assert kwargs["timeout"] == 30

    def test_no_authorization_header_without_token(self, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        assert "Authorization" not in GitHubSearchClient().headers

    def test_rejects_unsupported_page_size(self):
        with pytest.raises(ValueError):
            GitHubSearchClient(token="t", per_page=50)


class TestCandidateFiltering:

    def test_keeps_search_order(self, client, response, search_item):
        items = [search_item(3), search_item(1), search_item(2)]
        with patch(REQUESTS_GET, return_value=response(body={"items": items})):
            candidates = client.search_pull_requests("octocat")
        assert [c["title"] for c in candidates] == ["PR #3", "PR #1", "PR #2"]

    def test_drops_items_without_pull_request_marker(self, client, response, search_item):
        issue = search_item(1)
        del issue["pull_request"]
        with patch(REQUESTS_GET, return_value=response(body={"items": [issue, search_item(2)]})):
            candidates = client.search_pull_requests("octocat")
        assert [c["title"] for c in candidates] == ["PR #2"]

    def test_org_scope_filters_repository_url(self, client, response, search_item):
        items = [search_item(1, org="MetaMask"), search_item(2, org="elsewhere")]
        with patch(REQUESTS_GET, return_value=response(body={"items": items})):
            candidates = client.search_pull_requests("octocat", org="metamask")
        assert [c["title"] for c in candidates] == ["PR #1"]

    def test_empty_results_raise_no_prs_found(self, client, response):
        with patch(REQUESTS_GET, return_value=response(body={"items": []})):
            with pytest.raises(NoPullRequestsFound) as exc_info:
                client.search_pull_requests("octocat")
        assert exc_info.value.message == "No public merged PRs found for this user."

    def test_empty_scoped_results_mention_org(self, client, response, search_item):
        with patch(REQUESTS_GET, return_value=response(body={"items": [search_item(1, org="other")]})):
            with pytest.raises(NoPullRequestsFound, match="in MetaMask repositories"):
                client.search_pull_requests("octocat", org="MetaMask")


class TestErrorMapping:

    def test_403_is_rate_limit(self, client, response):
        with patch(REQUESTS_GET, return_value=response(403, headers={"X-RateLimit-Remaining": "0"})):
            with pytest.raises(RateLimitExceeded, match="rate limit"):
                client.search_pull_requests("octocat")

    def test_422_is_invalid_username(self, client, response):
        with patch(REQUESTS_GET, return_value=response(422, text="Validation Failed")):
            with pytest.raises(InvalidUsername, match="looks invalid"):
                client.search_pull_requests("not a user!")

    @pytest.mark.parametrize("status", [404, 500, 502])
    def test_other_statuses_are_generic_fetch_errors(self, client, response, status):
        with patch(REQUESTS_GET, return_value=response(status)):
            with pytest.raises(GitHubFetchError, match="Could not fetch PRs"):
                client.search_pull_requests("octocat")

    def test_transport_error_is_fetch_error(self, client):
        with patch(REQUESTS_GET, side_effect=requests.exceptions.ConnectionError("boom")):
            with pytest.raises(GitHubFetchError):
                client.get_pull_request("https://api.github.com/repos/o/r/pulls/1")

    def test_detail_fetch_uses_same_mapping(self, client, response):
        with patch(REQUESTS_GET, return_value=response(403)):
            with pytest.raises(RateLimitExceeded):
                client.get_pull_request("https://api.github.com/repos/o/r/pulls/1")

    def test_no_retry_on_failure(self, client, response):
        with patch(REQUESTS_GET, return_value=response(502)) as mock_get:
            with pytest.raises(GitHubFetchError):
                client.search_pull_requests("octocat")
        assert mock_get.call_count == 1


class TestHelpers:

    def test_repository_from_api_url(self):
        assert repository_from_url("https://api.github.com/repos/MetaMask/metamask-extension") == (
            "MetaMask/metamask-extension"
        )

    def test_repository_from_url_falls_back_to_raw_value(self):
        assert repository_from_url("not-a-url") == "not-a-url"

    def test_parse_timestamp(self):
        parsed = parse_timestamp("2025-01-03T10:00:00Z")
        assert (parsed.year, parsed.hour, parsed.utcoffset().total_seconds()) == (2025, 10, 0)
        assert parse_timestamp(None) is None
