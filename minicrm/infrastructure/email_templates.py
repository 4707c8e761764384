"""HTML renderers for scheduled emails.

The set of templates is closed: every identifier in :class:`EmailTemplate`
has exactly one renderer registered in ``_RENDERERS`` and any other
identifier is rendered with :attr:`EmailTemplate.DEFAULT`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from html import escape


class EmailTemplate(str, Enum):
    """Templates that can be selected when scheduling an email."""

    DEFAULT = "default"
    BUSINESS = "business"

    @property
    def label(self) -> str:
        return _TEMPLATE_LABELS[self]

    @classmethod
    def resolve(cls, template_id: str | None) -> "EmailTemplate":
        """Return the template for ``template_id`` falling back to ``DEFAULT``."""

        try:
            return cls((template_id or "").strip().lower())
        except ValueError:
            return cls.DEFAULT


_TEMPLATE_LABELS = {
    EmailTemplate.DEFAULT: "Default Template",
    EmailTemplate.BUSINESS: "Business Professional",
}


@dataclass(frozen=True)
class EmailContent:
    """Values interpolated into a template."""

    subject: str
    from_name: str
    to_name: str
    message: str


@dataclass(frozen=True)
class RenderedEmail:
    """Rendered subject plus HTML and plain-text bodies."""

    template: EmailTemplate
    subject: str
    html: str
    text: str


def _message_html(message: str) -> str:
    return escape(message).replace("\r\n", "\n").replace("\n", "<br>")


def _render_default(content: EmailContent) -> str:
    return "".join(
        (
            "<!DOCTYPE html>",
            '<html lang="en"><head><meta charset="UTF-8">',
            f"<title>{escape(content.subject)}</title></head>",
            '<body style="font-family:Segoe UI,Tahoma,sans-serif;background:#f0f8f0;'
            'color:#1a4d1a;padding:20px">',
            '<div style="max-width:600px;margin:0 auto;background:#fff;border-radius:16px;'
            'border:1px solid #c8e6c8;overflow:hidden">',
            '<div style="background:#1a5f1a;color:#fff;padding:32px;text-align:center">',
            f"<h1>{escape(content.subject)}</h1>",
            f"<p>From {escape(content.from_name)}</p></div>",
            '<div style="padding:32px">',
            f"<p>Hello {escape(content.to_name)},</p>",
            '<div style="border-left:4px solid #2d7a2d;padding:20px;margin:20px 0">',
            f"<p>{_message_html(content.message)}</p></div>",
            "<p>Best regards,</p>",
            f"<p><strong>{escape(content.from_name)}</strong></p>",
            "</div></div></body></html>",
        )
    )


def _render_business(content: EmailContent) -> str:
    today = date.today().strftime("%b %d, %Y")
    return "".join(
        (
            "<!DOCTYPE html>",
            '<html lang="en"><head><meta charset="UTF-8">',
            f"<title>{escape(content.subject)}</title></head>",
            '<body style="font-family:Arial,Helvetica,sans-serif;background:#f4f6f8;'
            'color:#1f2933;padding:20px">',
            '<div style="max-width:640px;margin:0 auto;background:#fff;border-top:6px solid #1f4e79">',
            '<div style="padding:28px 32px;border-bottom:1px solid #e4e7eb">',
            f'<h2 style="margin:0">{escape(content.subject)}</h2></div>',
            '<div style="padding:32px">',
            f"<p>Dear {escape(content.to_name)},</p>",
            f"<p>{_message_html(content.message)}</p>",
            '<table style="width:100%;margin-top:32px;border-top:1px solid #e4e7eb"><tr>',
            "<td><p>Best professional regards,</p>",
            f"<p><strong>{escape(content.from_name)}</strong></p>",
            "<p>Business Representative</p></td>",
            '<td style="text-align:right;color:#7b8794">',
            f"<div>Email sent via Mini CRM</div><div>{today}</div></td>",
            "</tr></table></div></div></body></html>",
        )
    )


_RENDERERS: dict[EmailTemplate, Callable[[EmailContent], str]] = {
    EmailTemplate.DEFAULT: _render_default,
    EmailTemplate.BUSINESS: _render_business,
}


def render_plain_text(content: EmailContent) -> str:
    return (
        f"Hello {content.to_name},\n\n{content.message}\n\n"
        f"Best regards,\n{content.from_name}"
    )


def render_email(template_id: str | None, content: EmailContent) -> RenderedEmail:
    """Render ``content`` with ``template_id`` or the default template."""

    template = EmailTemplate.resolve(template_id)
    renderer = _RENDERERS[template]
    return RenderedEmail(
        template=template,
        subject=content.subject,
        html=renderer(content),
        text=render_plain_text(content),
    )


def list_email_templates() -> list[dict[str, str]]:
    """Return the identifiers and labels of the available templates."""

    return [{"id": template.value, "name": template.label} for template in EmailTemplate]


__all__ = [
    "EmailContent",
    "EmailTemplate",
    "RenderedEmail",
    "list_email_templates",
    "render_email",
    "render_plain_text",
]
