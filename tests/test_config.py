"""Tests for environment-driven settings."""

from nfcforge.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("NFCFORGE_CURRENCY", raising=False)

        settings = Settings(_env_file=None)

        assert settings.currency == "usd"
        assert settings.max_order_quantity == 100_000
        assert settings.email_service_url == ""

    def test_reads_prefixed_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("NFCFORGE_CURRENCY", "eur")
        monkeypatch.setenv("NFCFORGE_MAX_ORDER_QUANTITY", "5000")

        settings = Settings(_env_file=None)

        assert settings.currency == "eur"
        assert settings.max_order_quantity == 5000
