"""Shared fixtures: canned GitHub JSON and mocked HTTP responses."""

import pytest
from unittest.mock import Mock


def make_search_item(number, labels=(), org="octo-org", repo="widgets", merged_at="2025-01-03T10:00:00Z"):
    """Build one /search/issues item the way GitHub returns it for a PR."""
    return {
        "title": f"PR #{number}",
        "html_url": f"https://github.com/{org}/{repo}/pull/{number}",
        "repository_url": f"https://api.github.com/repos/{org}/{repo}",
        "created_at": "2025-01-02T09:00:00Z",
        "closed_at": merged_at,
        "labels": [{"name": name} for name in labels],
        "pull_request": {
            "url": f"https://api.github.com/repos/{org}/{repo}/pulls/{number}",
            "merged_at": merged_at,
        },
    }


def make_pr_detail(item, additions, deletions, merged_at="2025-01-03T10:00:00Z"):
    """Build the /pulls/{n} detail body matching a search item."""
    owner_repo = item["repository_url"].split("/repos/", 1)[1]
    return {
        "title": item["title"],
        "html_url": item["html_url"],
        "additions": additions,
        "deletions": deletions,
        "created_at": item["created_at"],
        "merged_at": merged_at,
        "base": {"repo": {"full_name": owner_repo}},
    }


def make_response(status_code=200, body=None, text="", headers=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body if body is not None else {}
    response.text = text
    response.headers = headers or {}
    return response


@pytest.fixture
def search_item():
    return make_search_item


@pytest.fixture
def pr_detail():
    return make_pr_detail


@pytest.fixture
def response():
    return make_response
