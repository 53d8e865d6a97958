"""Email channel registry.

Uses the fake adapter unless a real one has been installed with
`set_email_channel`.
"""

from marketplace.notification.channel.email_port import EmailPort
from marketplace.notification.channel.fake_email import FakeEmailAdapter

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    global _email_channel
    if _email_channel is None:
        _email_channel = FakeEmailAdapter()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_email_channel() -> None:
    global _email_channel
    _email_channel = None
