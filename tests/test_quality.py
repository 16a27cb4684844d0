"""
Tests for QualityRule.
"""

from conftest import SHORT_UNSTRUCTURED, WELL_FORMED

from content_audit.core.models import Severity
from content_audit.rules import QualityRule


class TestQualityScenario:

    def test_short_unstructured_article(self, make_article, make_context):
        issue = QualityRule().execute(make_context(make_article(SHORT_UNSTRUCTURED)))

        assert issue.issue == "Lacks proper structure"
        assert issue.severity == Severity.HIGH
        assert len(issue.metadata["structure_problems"]) == 2
        assert issue.metadata["word_count"] == 20
        assert "Content too short" in issue.metadata["all_issue_types"]
        assert len(issue.suggestions) <= 8

    def test_empty_content_reports_length_only(self, make_article, make_context):
        issue = QualityRule().execute(make_context(make_article("")))

        assert issue.issue == "Content too short"
        assert issue.metadata["all_issue_types"] == ["Content too short"]


class TestChecks:

    def setup_method(self):
        self.rule = QualityRule()
        self.config = self.rule.config

    def test_content_length_bounds(self):
        short = self.rule.check_content_length(10, self.config)
        long = self.rule.check_content_length(6000, self.config)

        assert short.issue == "Content too short"
        assert short.severity == Severity.MEDIUM
        assert long.issue == "Content very lengthy"
        assert long.severity == Severity.LOW
        assert self.rule.check_content_length(300, self.config) is None

    def test_poor_readability(self):
        content = "Internationalization considerations necessitate comprehensive documentation."
        issue = self.rule.check_readability(content, self.config)

        assert issue.issue == "Poor readability"
        assert issue.severity == Severity.HIGH
        assert isinstance(issue.metadata["readability_score"], int)

    def test_overly_long_sentences(self):
        sentence = " ".join(["word"] * 30) + "."
        titles = [issue.issue for issue in self.rule.check_grammar(sentence, self.config)]
        assert "Overly long sentences" in titles

    def test_grammar_problems_are_capped(self):
        content = "# first header\n# second header\n# third header\n# fourth header\nText  here."
        issues = self.rule.check_grammar(content, self.config)

        grammar = next(issue for issue in issues if issue.issue == "Grammar and formatting issues")
        assert len(grammar.metadata["problems"]) == 3

    def test_well_formed_structure(self):
        assert self.rule.check_structure(WELL_FORMED, self.config) is None
        assert self.rule.check_formatting(WELL_FORMED) == []

    def test_missing_headers_only(self):
        content = "First paragraph here.\n\nSecond paragraph here."
        issue = self.rule.check_structure(content, self.config)

        assert issue.metadata["structure_problems"] == [
            "Content lacks proper header structure for easy navigation"
        ]
        assert issue.metadata["paragraph_count"] == 2

    def test_headers_can_be_optional(self):
        rule = QualityRule()
        rule.update_config({"require_headers": False})
        content = "First paragraph here.\n\nSecond paragraph here."
        assert rule.check_structure(content, rule.config) is None

    def test_unformatted_code(self):
        titles = [issue.issue for issue in self.rule.check_formatting("Run def main to start.")]
        assert titles == ["Unformatted code content"]
        assert self.rule.check_formatting("Run `def main` to start.") == []

    def test_unformatted_urls(self):
        titles = [issue.issue for issue in self.rule.check_formatting("Visit https://a.io today.")]
        assert titles == ["Unformatted URLs"]
        assert self.rule.check_formatting("Visit [the site](https://a.io) today.") == []

    def test_poor_list_formatting(self):
        titles = [issue.issue for issue in self.rule.check_formatting("Step 1. Open the app")]
        assert titles == ["Poor list formatting"]


class TestConfigValidation:

    def test_validate_config(self):
        rule = QualityRule()
        assert rule.validate_config(rule.config)
        assert not rule.validate_config(rule.merged_config({"min_word_count": 0}))
        assert not rule.validate_config(rule.merged_config({"max_readability_score": 20}))
        assert not rule.validate_config(rule.merged_config({"max_sentence_length": "long"}))
