from types import SimpleNamespace

import pytest

from config import get_settings_module

from account_service.container import build_notifications
from account_service.notifications.gateway import LoggingNotificationGateway, SmtpNotificationGateway


@pytest.mark.parametrize(
    "env, module",
    [
        ("production", "config.production"),
        ("prod", "config.production"),
        ("testing", "config.testing"),
        ("anything", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == module


def test_settings_module_defaults_to_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_settings_module() == "config.development"


def test_build_notifications_by_backend():
    assert isinstance(build_notifications(SimpleNamespace(MAIL_BACKEND="log")), LoggingNotificationGateway)
    smtp = build_notifications(SimpleNamespace(MAIL_BACKEND="smtp", MAIL_HOST="mail.example.com", MAIL_PORT=25))
    assert isinstance(smtp, SmtpNotificationGateway)

    with pytest.raises(ValueError):
        build_notifications(SimpleNamespace(MAIL_BACKEND="carrier-pigeon"))
