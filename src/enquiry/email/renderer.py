"""Render a validated submission into the branded notification email.

Pure and deterministic: the same ``SubmissionInput`` and ``Branding`` always
produce a byte-identical ``RenderedEmail``.  The only timestamp shown is the
submission's own ``received_at``.

Every user-supplied value is escaped by Jinja2 autoescaping at interpolation
time, regardless of any escaping done upstream.  The plain-text body is
derived from the HTML body (tags stripped, entities decoded) rather than
generated separately.
"""

from __future__ import annotations

import re
from datetime import datetime

from bs4 import BeautifulSoup
from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from markupsafe import Markup, escape

from enquiry.domain.models import SubmissionInput
from enquiry.email.models import Branding, RenderedEmail

_TEMPLATE_NAME = "contact_email.html"

_BLOCK_TAGS = ["p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "tr", "li", "ul", "ol", "table"]
_HIDDEN_TAGS = ["head", "style", "script", "title"]
_HORIZONTAL_WS = re.compile(r"[ \t\r\f\v]+")
_PHONE_URI_STRIP = re.compile(r"[^0-9+]")

_environment = Environment(
    loader=PackageLoader("enquiry.email", "templates"),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def format_received(moment: datetime) -> str:
    """Format a timestamp like ``October 19, 2026 at 6:05 PM UTC``."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    zone = moment.tzname() or "UTC"
    return f"{moment:%B} {moment.day}, {moment.year} at {hour}:{moment:%M} {meridiem} {zone}"


def _message_html(message: str) -> Markup:
    """Escape the message and turn its line breaks into ``<br>`` tags."""
    return Markup("<br>").join(escape(line) for line in message.splitlines())


def html_to_text(html_body: str) -> str:
    """Strip tags and decode entities, keeping one blank line between blocks.

    Args:
        html_body: An HTML document or fragment.

    Returns:
        Plain text with normalized horizontal whitespace.
    """
    soup = BeautifulSoup(html_body, "html.parser")
    while (hidden := soup.find(_HIDDEN_TAGS)) is not None:
        hidden.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(_BLOCK_TAGS):
        block.insert_before("\n")
        block.insert_after("\n")

    lines: list[str] = []
    for raw_line in soup.get_text().split("\n"):
        line = _HORIZONTAL_WS.sub(" ", raw_line).strip()
        if line or (lines and lines[-1]):
            lines.append(line)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines) + "\n"


class EmailRenderer:
    """Build ``RenderedEmail`` values for contact-form submissions.

    Args:
        branding: Business details for the header, footer and subject.
    """

    def __init__(self, branding: Branding | None = None) -> None:
        self._branding = branding or Branding()
        self._template = _environment.get_template(_TEMPLATE_NAME)

    def render(self, submission: SubmissionInput) -> RenderedEmail:
        """Render the notification for one validated submission.

        Args:
            submission: A submission that passed the ``FormValidator``.

        Returns:
            The subject, HTML body, derived plain-text body and reply-to address.
        """
        first = submission.first_name.strip()
        last = submission.last_name.strip()
        email = submission.email.strip()
        phone = submission.phone.strip()

        html_body = self._template.render(
            branding=self._branding,
            received=format_received(submission.received_at),
            full_name=f"{first} {last}".strip(),
            email=email,
            phone=phone,
            phone_uri=_PHONE_URI_STRIP.sub("", phone),
            message_html=_message_html(submission.message.strip()),
        )

        return RenderedEmail(
            subject=self._branding.subject,
            html_body=html_body,
            plain_text_body=html_to_text(html_body),
            reply_to=email,
        )
