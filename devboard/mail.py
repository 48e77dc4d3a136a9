# devboard/mail.py
# Best-effort transactional email (verification + password reset)

from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

import jinja2

from devboard.config import IS_DEV, Settings

PRODUCT_NAME = "DevBoard"
PRODUCT_LINK = "https://devboard.app"

HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
  <body style="font-family: Helvetica, Arial, sans-serif; color: #333;">
    <h2>Hi {{ content.name }},</h2>
    <p>{{ content.intro }}</p>
    {% if content.action_link %}
    <p>{{ content.action_instructions }}</p>
    <p>
      <a href="{{ content.action_link }}"
         style="background: {{ content.button_color }}; color: #fff; padding: 10px 18px; text-decoration: none; border-radius: 3px;">
        {{ content.button_text }}
      </a>
    </p>
    {% endif %}
    <p>{{ content.outro }}</p>
    <p>&mdash; <a href="{{ product_link }}">{{ product_name }}</a></p>
  </body>
</html>
"""

TEXT_TEMPLATE = """\
Hi {{ content.name }},

{{ content.intro }}
{% if content.action_link %}
{{ content.action_instructions }}
{{ content.action_link }}
{% endif %}
{{ content.outro }}

-- {{ product_name }} ({{ product_link }})
"""

_templates = jinja2.Environment(
    loader=jinja2.DictLoader({"mail.html": HTML_TEMPLATE, "mail.txt": TEXT_TEMPLATE}),
    autoescape=jinja2.select_autoescape(enabled_extensions=("html",), default_for_string=False),
    keep_trailing_newline=True,
)


@dataclass(frozen=True)
class MailContent:
    name: str
    intro: str
    outro: str
    action_instructions: str = ""
    button_text: str = ""
    action_link: str = ""
    button_color: str = "#22BC66"


def email_verification_content(username: str, verification_url: str) -> MailContent:
    return MailContent(
        name=username,
        intro=f"Welcome to {PRODUCT_NAME}! We're very excited to have you on board.",
        action_instructions="To verify your email, please click here:",
        button_text="Verify your email",
        action_link=verification_url,
        outro="Need help, or have questions? Just reply to this email, we'd love to help.",
    )


def forgot_password_content(username: str, reset_url: str) -> MailContent:
    return MailContent(
        name=username,
        intro="We got a request to reset the password for your account",
        action_instructions="To reset password, click on the following button",
        button_text="Reset Password",
        action_link=reset_url,
        outro="Need help, or have questions? Just reply to this email, we'd love to help.",
    )


def render(content: MailContent) -> tuple:
    """Return (html, text) bodies for a piece of mail content."""
    context = {"content": content, "product_name": PRODUCT_NAME, "product_link": PRODUCT_LINK}
    html = _templates.get_template("mail.html").render(**context)
    text = _templates.get_template("mail.txt").render(**context)
    return html, text


class Mailer:
    """
    SMTP mailer.

    send() never raises: delivery is not coupled to the business operation
    that triggered it, so failures are printed and reported as False.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def build_message(self, to: str, subject: str, content: MailContent) -> EmailMessage:
        html, text = render(content)
        msg = EmailMessage()
        msg["From"] = self.settings.mail_sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, to: str, subject: str, content: MailContent) -> bool:
        if not self.settings.mail_host:
            if IS_DEV:
                print(f"[MAIL] Delivery disabled (MAIL_HOST unset), skipped: subject={subject!r}")
            return False

        try:
            msg = self.build_message(to, subject, content)
            with smtplib.SMTP(self.settings.mail_host, self.settings.mail_port, timeout=10) as smtp:
                if self.settings.mail_username:
                    smtp.login(self.settings.mail_username, self.settings.mail_password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError, jinja2.TemplateError) as e:
            print(f"[MAIL] Email service failed silently, check MAIL_* settings: {type(e).__name__}: {e}")
            return False

        if IS_DEV:
            print(f"[MAIL] Sent: subject={subject!r}")
        return True


class RecordingMailer(Mailer):
    """Mailer that keeps messages in memory instead of delivering them."""

    def __init__(self, settings: Optional[Settings] = None, fail: bool = False):
        super().__init__(settings or Settings())
        self.fail = fail
        self.outbox = []

    def send(self, to: str, subject: str, content: MailContent) -> bool:
        if self.fail:
            print(f"[MAIL] Simulated delivery failure: subject={subject!r}")
            return False
        self.outbox.append({"to": to, "subject": subject, "content": content})
        return True
