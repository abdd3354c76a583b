"""Mailer registry. Uses the fake mailer until a real one is configured."""

from storefront.mail.port import MailerPort

_current_mailer: MailerPort | None = None


def get_mailer() -> MailerPort:
    global _current_mailer
    if _current_mailer is None:
        from storefront.mail.fake_mailer import FakeMailer

        _current_mailer = FakeMailer()
    return _current_mailer


def set_mailer(mailer: MailerPort) -> None:
    global _current_mailer
    _current_mailer = mailer


def reset_mailer() -> None:
    global _current_mailer
    _current_mailer = None
