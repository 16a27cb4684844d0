"""
Tests for the typer CLI.
"""

import json

import httpx
import pytest
from typer.testing import CliRunner

from conftest import SHORT_UNSTRUCTURED

from cli import main as cli_main
from cli.main import app

runner = CliRunner()


@pytest.fixture
def articles_file(tmp_path):
    path = tmp_path / "articles.json"
    path.write_text(json.dumps([
        {
            "id": "old",
            "title": "Legacy Billing Export Guide",
            "content": SHORT_UNSTRUCTURED,
            "lastModified": "2020-01-01T00:00:00Z",
        },
        {
            "id": "other",
            "title": "Another Article",
            "content": "Plain text.",
            "lastModified": "2020-01-01T00:00:00Z",
        },
    ]), encoding="utf-8")
    return path


class TestRuleCommands:

    def test_rules(self):
        result = runner.invoke(app, ["rules"])
        assert result.exit_code == 0
        assert "Stale" in result.output

    def test_rules_by_tag(self):
        result = runner.invoke(app, ["rules", "--tag", "links"])
        assert result.exit_code == 0
        assert "broken-links" in result.output
        assert "stale-content" not in result.output

    def test_show_rule(self):
        result = runner.invoke(app, ["show-rule", "stale-content"])
        assert result.exit_code == 0
        assert "max_age_months" in result.output

    def test_show_unknown_rule(self):
        result = runner.invoke(app, ["show-rule", "missing"])
        assert result.exit_code == 1


class TestAuditCommand:

    def test_audit_json(self, articles_file):
        result = runner.invoke(app, ["audit", str(articles_file), "--json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["summary"]["total_articles"] == 2
        old = next(r for r in data["results"] if r["article_id"] == "old")
        stale = next(i for i in old["issues"] if i["rule_id"] == "stale-content")
        assert stale["severity"] == "critical"

    def test_audit_selected_rules(self, articles_file):
        result = runner.invoke(app, ["audit", str(articles_file), "--rule", "stale-content", "--json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert all(r["total_rules_executed"] == 1 for r in data["results"])

    def test_audit_table_output(self, articles_file):
        result = runner.invoke(app, ["audit", str(articles_file)])
        assert result.exit_code == 0
        assert "Legacy" in result.output

    def test_audit_writes_report(self, articles_file, tmp_path):
        output_dir = tmp_path / "reports"
        result = runner.invoke(app, [
            "audit", str(articles_file), "--report", "markdown", "--output-dir", str(output_dir),
        ])

        assert result.exit_code == 0
        reports = list(output_dir.glob("content_audit_*.md"))
        assert len(reports) == 1

    def test_audit_missing_file(self, tmp_path):
        result = runner.invoke(app, ["audit", str(tmp_path / "missing.json")])
        assert result.exit_code == 1

    def test_audit_bad_severity(self, articles_file):
        result = runner.invoke(app, ["audit", str(articles_file), "--min-severity", "urgent"])
        assert result.exit_code == 2


class TestStatsCommand:

    def test_stats_from_backend(self, monkeypatch):
        payload = {
            "total_rules": 5,
            "enabled_rules": 4,
            "configurable_rules": 5,
            "rule_categories": {"content-quality": 3, "technical": 1, "seo": 1},
            "sample_audit": {"articles_audited": 2, "total_issues": 3, "average_health_score": 70.0},
        }

        def fake_get(url, timeout):
            assert url.endswith("/api/audit/stats")
            return httpx.Response(200, json=payload, request=httpx.Request("GET", url))

        monkeypatch.setattr(cli_main.httpx, "get", fake_get)
        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 0
        assert "70.0" in result.output

    def test_stats_backend_down(self, monkeypatch):
        def fake_get(url, timeout):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(cli_main.httpx, "get", fake_get)
        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 1


class TestMiscCommands:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "content-audit" in result.output

    def test_serve_runs_uvicorn(self, monkeypatch):
        import uvicorn

        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
        result = runner.invoke(app, ["serve", "--port", "9000"])
        assert result.exit_code == 0
        assert calls == [("backend.main:app", {"host": "0.0.0.0", "port": 9000, "reload": False})]
