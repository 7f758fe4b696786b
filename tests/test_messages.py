"""Tests for notification message text."""

from datetime import datetime

from wintrack.messages import boot_message, elapsed_message, shutdown_message, substitute

NOW = datetime(2026, 3, 14, 9, 26, 53)


class TestMessages:
    """Tests for the message builders."""

    def test_boot_message(self):
        text = boot_message(NOW)

        assert "Computer started" in text
        assert "2026-03-14 09:26:53" in text

    def test_shutdown_message(self):
        text = shutdown_message(NOW)

        assert "shutting down" in text
        assert "2026-03-14 09:26:53" in text

    def test_elapsed_message(self):
        text = elapsed_message(NOW, 2, 5)

        assert "2026-03-14 09:26:53" in text
        assert "2 hours 5 minutes" in text

    def test_messages_differ_by_kind(self):
        assert boot_message(NOW) != shutdown_message(NOW)


class TestSubstitute:
    """Tests for marker substitution."""

    def test_single_marker_replaced(self):
        result = substitute('{"content": "{{MARKDOWN}}"}', "hello")

        assert result == '{"content": "hello"}'
        assert "{{MARKDOWN}}" not in result

    def test_text_lands_at_marker_position(self):
        template = "before {{MARKDOWN}} after"
        result = substitute(template, "X")

        assert result.index("X") == template.index("{{MARKDOWN}}")

    def test_every_marker_replaced(self):
        result = substitute("{{MARKDOWN}}|{{MARKDOWN}}", "a")
        assert result == "a|a"

    def test_missing_marker_returns_template(self):
        template = '{"content": "static"}'
        assert substitute(template, "ignored") == template
