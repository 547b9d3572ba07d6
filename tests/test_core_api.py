import statchain
from statchain.config import Settings


def test_public_api_members():
    # Ensure core functions and classes are exposed
    assert hasattr(statchain, 'BlockChain')
    assert hasattr(statchain, 'new_chain')
    assert hasattr(statchain, 'Block')
    assert hasattr(statchain, 'SENTINEL_FINGERPRINT')
    assert hasattr(statchain, 'InvalidInput')
    assert hasattr(statchain, 'BlockLogWriter')
    assert hasattr(statchain, 'SampleGenerator')
    assert hasattr(statchain, 'read_batches')
    assert hasattr(statchain, 'start_metrics_server')


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("STATCHAIN_BATCH_SIZE", raising=False)
    settings = Settings(_env_file=None)
    assert settings.batch_size == 100
    assert settings.generator_interval_seconds == 5.0


def test_settings_env_override(monkeypatch):
    monkeypatch.setenv("STATCHAIN_BATCH_SIZE", "12")
    monkeypatch.setenv("STATCHAIN_GENERATOR_INTERVAL_SECONDS", "0.5")
    settings = Settings(_env_file=None, batch_size=50)
    # environment wins over init arguments
    assert settings.batch_size == 12
    assert settings.generator_interval_seconds == 0.5
