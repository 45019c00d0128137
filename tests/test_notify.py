"""Tests for the email notification module."""

from unittest.mock import MagicMock, patch

import pytest

from release_tracker.errors import FetchCycleError
from release_tracker.notify import (
    SUBJECT_PREFIX,
    is_enabled,
    notify_dataset_refreshed,
    notify_empty_orgs,
    notify_fetch_failure,
    send_email,
)


@pytest.fixture
def smtp_config(monkeypatch):
    monkeypatch.setattr("release_tracker.notify.SMTP_USER", "tracker@gmail.com")
    monkeypatch.setattr("release_tracker.notify.SMTP_PASSWORD", "app-password")
    monkeypatch.setattr("release_tracker.notify.NOTIFY_TO", "team@example.com")


@pytest.fixture
def mock_smtp():
    instance = MagicMock()
    instance.__enter__ = MagicMock(return_value=instance)
    instance.__exit__ = MagicMock(return_value=False)
    smtp_cls = MagicMock(return_value=instance)
    with patch("release_tracker.notify.smtplib.SMTP", smtp_cls):
        yield smtp_cls, instance


def sent_message(instance):
    return instance.send_message.call_args[0][0]


class TestIsEnabled:
    def test_enabled_when_all_vars_set(self, smtp_config):
        assert is_enabled() is True

    @pytest.mark.parametrize("var", ["SMTP_USER", "SMTP_PASSWORD", "NOTIFY_TO"])
    def test_disabled_when_any_var_missing(self, smtp_config, monkeypatch, var):
        monkeypatch.setattr(f"release_tracker.notify.{var}", None)
        assert is_enabled() is False


class TestSendEmail:
    def test_calls_smtp(self, smtp_config, mock_smtp):
        smtp_cls, instance = mock_smtp
        send_email("Test Subject", "Test body")

        smtp_cls.assert_called_once_with("smtp.gmail.com", 587)
        instance.starttls.assert_called_once()
        instance.login.assert_called_once_with("tracker@gmail.com", "app-password")
        msg = sent_message(instance)
        assert msg["Subject"] == f"{SUBJECT_PREFIX} Test Subject"
        assert msg["From"] == "tracker@gmail.com"
        assert msg["To"] == "team@example.com"

    def test_swallows_errors(self, smtp_config):
        with patch("release_tracker.notify.smtplib.SMTP", side_effect=OSError("refused")):
            send_email("Test", "body")

    def test_skips_when_disabled(self, monkeypatch, mock_smtp):
        monkeypatch.setattr("release_tracker.notify.SMTP_USER", None)
        smtp_cls, _ = mock_smtp
        send_email("Test", "body")
        smtp_cls.assert_not_called()


class TestNotifications:
    def test_fetch_failure(self, smtp_config, mock_smtp):
        _, instance = mock_smtp
        notify_fetch_failure(FetchCycleError("No models fetched from any of 21 orgs"))

        msg = sent_message(instance)
        assert msg["Subject"] == f"{SUBJECT_PREFIX} Fetch cycle failed"
        body = msg.get_payload()
        assert "No models fetched" in body
        assert "--refresh" in body

    def test_empty_orgs(self, smtp_config, mock_smtp):
        _, instance = mock_smtp
        notify_empty_orgs(["microsoft", "openai"])

        msg = sent_message(instance)
        assert msg["Subject"] == f"{SUBJECT_PREFIX} 2 org(s) returned no models"
        body = msg.get_payload()
        assert "  - microsoft" in body
        assert "  - openai" in body

    def test_dataset_refreshed(self, smtp_config, mock_smtp):
        _, instance = mock_smtp
        notify_dataset_refreshed(["Models: 120", "Companies: 18"])

        msg = sent_message(instance)
        assert msg["Subject"] == f"{SUBJECT_PREFIX} Dataset refreshed"
        assert "Models: 120" in msg.get_payload()
