from __future__ import annotations

import logging
from unittest import mock

from phonebook.core import config as core_config
from phonebook.core.mailer import SmtpMailer
from phonebook.core.utils import absolute_url, normalize_email


def test_settings_defaults_and_invalid_ints(monkeypatch):
    monkeypatch.setenv("RECOVERY_TOKEN_TTL_SECONDS", "soon")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://phonebook.test/")
    monkeypatch.delenv("SMTP_HOST", raising=False)
    core_config.get_settings.cache_clear()
    try:
        settings = core_config.get_settings()
        assert settings.recovery_token_ttl_seconds == 3600
        assert settings.activation_token_ttl_seconds == 86400
        assert settings.public_base_url == "https://phonebook.test"
        assert settings.smtp_configured is False
        assert absolute_url("password/recovery/abc") == "https://phonebook.test/password/recovery/abc"
    finally:
        core_config.get_settings.cache_clear()


def test_normalize_email():
    assert normalize_email("  IVanov@Gmail.com ") == "ivanov@gmail.com"
    assert normalize_email(None) == ""


def _settings(**overrides) -> core_config.Settings:
    base = dict(
        app_env="test",
        public_base_url="https://phonebook.test",
        database_url="",
        smtp_host="smtp.phonebook.test",
        smtp_port=587,
        smtp_user="robot",
        smtp_password="pw",
        smtp_from="robot@phonebook.test",
        activation_token_ttl_seconds=86400,
        recovery_token_ttl_seconds=3600,
        log_level="INFO",
    )
    base.update(overrides)
    return core_config.Settings(**base)


def test_mailer_skips_when_smtp_missing(caplog):
    mailer = SmtpMailer(_settings(smtp_host=""))
    with mock.patch("smtplib.SMTP") as smtp, caplog.at_level(logging.WARNING, logger="phonebook.mail"):
        mailer.send_mail("ivanov@gmail.com", "Subject", "Body")
    smtp.assert_not_called()
    assert "SMTP not configured" in caplog.text


def test_mailer_uses_starttls_on_submission_port():
    mailer = SmtpMailer(_settings())
    with mock.patch("smtplib.SMTP") as smtp:
        mailer.send_mail("ivanov@gmail.com", "Subject", "Body")
    server = smtp.return_value.__enter__.return_value
    smtp.assert_called_once_with("smtp.phonebook.test", 587)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("robot", "pw")
    from_addr, to_addrs, payload = server.sendmail.call_args.args
    assert from_addr == "robot@phonebook.test"
    assert to_addrs == ["ivanov@gmail.com"]
    assert "Subject: Subject" in payload
