"""Tests for home page UI components."""
from workshop_registry.ui.home_page import _render_stat_card
from workshop_registry.ui.state import html_block


class TestStatCardRendering:
    """Tests for stat tile HTML."""

    def test_stat_card_contains_label_and_value(self):
        """Stat card should show its label and number."""
        html = _render_stat_card("Total Registered", 42)

        assert "Total Registered" in html
        assert ">42<" in html

    def test_stat_card_default_accent(self):
        """Stat card should use the workshop green by default."""
        html = _render_stat_card("Checked In", 3)

        assert "border-left: 6px solid #1b5e4e" in html

    def test_stat_card_custom_accent(self):
        """Stat card should apply a custom accent colour."""
        html = _render_stat_card("Checked In", 3, accent="#2e8b57")

        assert "border-left: 6px solid #2e8b57" in html
        assert "color: #2e8b57" in html

    def test_stat_card_escapes_label(self):
        """Labels should be HTML-escaped."""
        html = _render_stat_card("<b>Guests</b>", 1)

        assert "<b>Guests</b>" not in html
        assert "&lt;b&gt;Guests&lt;/b&gt;" in html

    def test_stat_card_has_no_indented_lines(self):
        """No line should start with spaces, or Markdown renders it as code."""
        html = _render_stat_card("Total Registered", 7)

        assert all(not line.startswith(" ") for line in html.splitlines())


class TestHtmlBlock:
    """Tests for html_block."""

    def test_strips_indentation(self):
        """Indented template lines are left-aligned."""
        assert html_block("""
            <div>
                <span>x</span>
            </div>
        """) == "<div>\n<span>x</span>\n</div>"
