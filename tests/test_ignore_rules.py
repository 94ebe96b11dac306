# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for IgnoreRules."""

from provide_seeker.ignore_rules import IgnoreRules


class TestGitignore:
    """Tests for .gitignore loading."""

    def test_gitignore_loading(self, tmp_path):
        """Test loading .gitignore patterns."""
        gitignore = tmp_path / ".gitignore"
        gitignore.write_text(
            """
# Comment line
*.log
generated/

# Another comment
temp_*
"""
        )

        rules = IgnoreRules(tmp_path)

        assert rules.gitignore_patterns == {"*.log", "generated", "temp_*"}

    def test_gitignore_missing(self, tmp_path):
        """Test initialization when .gitignore doesn't exist."""
        rules = IgnoreRules(tmp_path)

        assert len(rules.gitignore_patterns) == 0

    def test_gitignore_pattern_length_validation(self, tmp_path):
        """Test that overly long gitignore patterns are rejected."""
        gitignore = tmp_path / ".gitignore"
        valid_pattern = "a" * 1000
        invalid_pattern = "b" * 1001
        gitignore.write_text(f"{valid_pattern}\n{invalid_pattern}\n*.log\n")

        rules = IgnoreRules(tmp_path)

        assert valid_pattern in rules.gitignore_patterns
        assert invalid_pattern not in rules.gitignore_patterns
        assert "*.log" in rules.gitignore_patterns

    def test_explicit_gitignore_path(self, tmp_path):
        other = tmp_path / "other.ignore"
        other.write_text("legacy/\n")

        rules = IgnoreRules(tmp_path, gitignore_path=other)

        assert rules.should_ignore(tmp_path / "legacy" / "Old.vue")


class TestShouldIgnore:
    """Tests for should_ignore()."""

    def test_always_ignored(self, tmp_path):
        """Test hardcoded always-ignored directories."""
        rules = IgnoreRules(tmp_path)

        assert rules.should_ignore(tmp_path / ".git" / "config")
        assert rules.should_ignore(tmp_path / "node_modules" / "ui" / "Button.vue")
        assert rules.should_ignore(tmp_path / ".nuxt" / "components" / "App.vue")
        assert rules.should_ignore(tmp_path / "dist" / "Card.vue")
        assert not rules.should_ignore(tmp_path / "src" / "Card.vue")

    def test_nested_build_directory(self, tmp_path):
        """A build directory below src is ignored like one at the root."""
        rules = IgnoreRules(tmp_path)

        assert rules.should_ignore(tmp_path / "src" / "build" / "Widget.vue")
        assert rules.should_ignore(str(tmp_path / "packages" / "ui" / "coverage" / "Report.vue"))

    def test_gitignore_patterns(self, tmp_path):
        """Test .gitignore patterns are respected."""
        (tmp_path / ".gitignore").write_text("*.log\ntemp_*\ngenerated/\n")

        rules = IgnoreRules(tmp_path)

        assert rules.should_ignore(tmp_path / "debug.log")
        assert rules.should_ignore(tmp_path / "temp_Card.vue")
        assert rules.should_ignore(tmp_path / "generated" / "Icons.vue")
        assert not rules.should_ignore(tmp_path / "src" / "Icons.vue")

    def test_user_patterns(self, tmp_path):
        """Test user-configured ignore patterns."""
        rules = IgnoreRules(tmp_path, user_ignore_patterns={"stories/*", "*.spec.vue"})

        assert rules.should_ignore(tmp_path / "stories" / "Card.vue")
        assert rules.should_ignore(tmp_path / "src" / "Card.spec.vue")
        assert not rules.should_ignore(tmp_path / "src" / "Card.vue")

    def test_double_star_prefix_matches_at_root(self, tmp_path):
        rules = IgnoreRules(tmp_path, user_ignore_patterns=["**/vendor/**"])

        assert rules.should_ignore(tmp_path / "vendor" / "Grid.vue")
        assert rules.should_ignore(tmp_path / "src" / "vendor" / "Grid.vue")
        assert not rules.should_ignore(tmp_path / "src" / "Grid.vue")

    def test_relative_path(self, tmp_path):
        rules = IgnoreRules(tmp_path, user_ignore_patterns=["gen/*"])

        assert rules.should_ignore("gen/Icons.vue")
        assert rules.should_ignore("node_modules/ui/Button.vue")
        assert not rules.should_ignore("src/Icons.vue")
