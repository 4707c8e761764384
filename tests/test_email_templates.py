"""Tests for scheduled email rendering."""

from __future__ import annotations

from minicrm.infrastructure.email_templates import (
    EmailContent,
    EmailTemplate,
    list_email_templates,
    render_email,
)

CONTENT = EmailContent(
    subject="Launch <update>",
    from_name="Mia",
    to_name="Carl",
    message="Line one\nLine two & more",
)


def test_templates_are_listed_with_labels():
    assert list_email_templates() == [
        {"id": "default", "name": "Default Template"},
        {"id": "business", "name": "Business Professional"},
    ]


def test_unknown_template_falls_back_to_default():
    rendered = render_email("holiday", CONTENT)

    assert rendered.template is EmailTemplate.DEFAULT
    assert rendered.html == render_email("default", CONTENT).html
    assert render_email(None, CONTENT).template is EmailTemplate.DEFAULT


def test_rendered_html_escapes_content_and_keeps_line_breaks():
    rendered = render_email("business", CONTENT)

    assert rendered.template is EmailTemplate.BUSINESS
    assert "Launch &lt;update&gt;" in rendered.html
    assert "Line one<br>Line two &amp; more" in rendered.html
    assert "<update>" not in rendered.html


def test_plain_text_alternative():
    rendered = render_email("default", CONTENT)

    assert rendered.subject == "Launch <update>"
    assert rendered.text == "Hello Carl,\n\nLine one\nLine two & more\n\nBest regards,\nMia"
