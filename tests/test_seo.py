"""
Tests for SEORule.
"""

import pytest

from conftest import WELL_FORMED

from content_audit.core.models import Severity
from content_audit.rules import SEORule
from content_audit.rules.seo import extract_keywords, has_proper_hierarchy


class TestHelpers:

    def test_extract_keywords(self):
        assert extract_keywords("How to Reset Your Password", ["Account"]) == [
            "reset", "your", "password", "account",
        ]

    def test_extract_keywords_deduplicates(self):
        assert extract_keywords("Password: password!", ["password"]) == ["password"]
        assert extract_keywords(None, []) == []

    @pytest.mark.parametrize("levels, expected", [
        ([], False),
        ([1, 2, 3, 2], True),
        ([2, 3], True),
        ([1, 3], True),
        ([1, 4], False),
        ([3], False),
        ([1, 2, 4], True),
    ])
    def test_heading_hierarchy(self, levels, expected):
        assert has_proper_hierarchy(levels) is expected


class TestSEOScenario:

    def test_missing_description_is_primary(self, make_article, make_context):
        article = make_article(WELL_FORMED, description=None, tags=["account"])
        issue = SEORule().execute(make_context(article))

        assert issue.issue == "Missing meta description"
        assert issue.severity == Severity.HIGH
        assert issue.metadata["target_keywords"] == ["resetting", "your", "account"]

    def test_excerpt_counts_as_description(self, make_article, make_context):
        article = make_article(WELL_FORMED, description=None, excerpt="Reset a password.")
        issue = SEORule().execute(make_context(article))

        assert "Missing meta description" not in issue.metadata["all_issue_types"]
        assert issue.severity == Severity.LOW

    def test_empty_content(self, make_article, make_context):
        assert SEORule().execute(make_context(make_article(""))) is None


class TestChecks:

    def setup_method(self):
        self.rule = SEORule()
        self.config = self.rule.config

    def test_content_length(self):
        assert self.rule.check_content_length(100, self.config).issue == "Content too short for SEO"
        assert self.rule.check_content_length(3000, self.config).issue == "Content may be too long"
        assert self.rule.check_content_length(800, self.config) is None

    def test_heading_structure(self):
        assert self.rule.check_heading_structure("No headings here.").issue == "Missing heading structure"

        issue = self.rule.check_heading_structure("# Title\n\n#### Deep")
        assert issue.issue == "Poor heading hierarchy"
        assert issue.metadata["has_h1"] is True

        assert self.rule.check_heading_structure(WELL_FORMED) is None

    def test_keyword_density(self):
        stuffed = " ".join(["password"] * 10 + ["other"] * 20)
        issues = self.rule.check_keyword_density(stuffed, ["password"], self.config)
        assert [issue.issue for issue in issues] == ["Keyword over-optimization"]
        assert issues[0].metadata["occurrences"] == 10

        sparse = " ".join(["other"] * 50)
        issues = self.rule.check_keyword_density(sparse, ["password"], self.config)
        assert [issue.issue for issue in issues] == ["Low keyword density"]
        assert issues[0].metadata["occurrences"] == 0

    def test_keyword_matches_inside_words(self):
        content = " ".join(["passwords"] + ["other"] * 99)
        assert self.rule.check_keyword_density(content, ["password"], self.config) == []

    def test_title_length(self, make_article):
        short = self.rule.check_meta_elements(make_article(title="Short"), self.config)
        long = self.rule.check_meta_elements(make_article(title="x" * 70), self.config)

        assert [issue.issue for issue in short] == ["Title too short"]
        assert [issue.issue for issue in long] == ["Title too long"]

    def test_image_alt_text(self):
        content = "![image](a.png) ![Login screen](b.png) ![](c.png) ![shot.png](d.png)"
        issue = self.rule.check_image_alt_text(content)

        assert issue.metadata["total_images"] == 4
        assert issue.metadata["missing_alt"] == 3
        assert self.rule.check_image_alt_text("![Login screen](b.png)") is None

    def test_internal_linking(self):
        external = "See [Python](https://python.org) and [Rust](https://rust-lang.org)."
        assert self.rule.check_internal_linking(external).issue == "No internal links found"
        assert self.rule.check_internal_linking(WELL_FORMED) is None
        assert self.rule.check_internal_linking("No links.") is None

    def test_validate_config(self):
        assert self.rule.validate_config(self.config)
        assert not self.rule.validate_config(self.rule.merged_config({"min_title_length": 80}))
        assert not self.rule.validate_config(self.rule.merged_config({"max_keyword_density": "3%"}))
