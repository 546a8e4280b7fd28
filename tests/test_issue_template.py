"""Tests for issue-tracker URL building (infra/issue_template.py)."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

from flutter_harness.infra.issue_template import IssueTemplateCreator

BASE = "https://github.com/flutter/flutter/issues"


class TestSimilarIssues:
    def test_search_url(self) -> None:
        url = IssueTemplateCreator(BASE + "/").similar_issues_url("null check")
        assert url == f"{BASE}?q=is%3Aissue+null+check"


class TestNewIssue:
    def _query(self, url: str) -> dict[str, list[str]]:
        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == f"{BASE}/new"
        return parse_qs(parts.query)

    def test_prefilled_fields(self) -> None:
        url = IssueTemplateCreator(BASE).new_issue_url(
            "flutter run",
            "kaboom",
            "RuntimeError: kaboom",
            "trace",
            "doctor text",
        )
        query = self._query(url)

        assert query["title"] == ["[tool_crash] RuntimeError: kaboom"]
        assert query["labels"] == ["tool,severe: crash"]
        body = query["body"][0]
        assert "flutter run" in body
        assert "trace" in body
        assert "doctor text" in body
        assert "## Error message\nkaboom" in body

    def test_long_title_truncated(self) -> None:
        url = IssueTemplateCreator(BASE).new_issue_url(
            "flutter", "m", "E: " + "x" * 500, "", "",
        )
        title = self._query(url)["title"][0]

        assert len(title) == 200
        assert title.endswith("...")
