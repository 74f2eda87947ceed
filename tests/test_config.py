"""Tests for TokenVaultConfig and build_engine selection."""

import pytest

from tokenvault.config import TokenVaultConfig
from tokenvault.engines import MemoryEngine, TheBrainEngine, build_engine


FULL_THEBRAIN = dict(
    thebrain_api_key="key",
    thebrain_brain_id="brain",
    thebrain_home_thought_id="home",
)


class TestFromEnv:
    def test_reads_variables(self) -> None:
        config = TokenVaultConfig.from_env({
            "TOKENVAULT_THEBRAIN_API_KEY": "key",
            "TOKENVAULT_THEBRAIN_BRAIN_ID": "brain",
            "TOKENVAULT_THEBRAIN_HOME_THOUGHT_ID": "home",
            "TOKEN_ENCRYPTION_SECRET": "s3cret",
            "TOKENVAULT_HTTP_TIMEOUT": "5",
        })
        assert config == TokenVaultConfig(
            token_encryption_secret="s3cret", http_timeout_secs=5.0, **FULL_THEBRAIN,
        )

    def test_blank_values_are_unset(self) -> None:
        config = TokenVaultConfig.from_env({"TOKENVAULT_THEBRAIN_API_KEY": "  "})
        assert config == TokenVaultConfig()

    def test_config_is_frozen(self) -> None:
        with pytest.raises(AttributeError):
            TokenVaultConfig().thebrain_api_key = "x"  # type: ignore[misc]


class TestBuildEngine:
    def test_memory_when_unconfigured(self) -> None:
        assert isinstance(build_engine(TokenVaultConfig()), MemoryEngine)

    def test_thebrain_when_configured(self) -> None:
        engine = build_engine(TokenVaultConfig(token_encryption_secret="s", **FULL_THEBRAIN))
        assert isinstance(engine, TheBrainEngine)
        assert engine.encrypted

    def test_thebrain_without_secret_is_plaintext(self) -> None:
        engine = build_engine(TokenVaultConfig(**FULL_THEBRAIN))
        assert isinstance(engine, TheBrainEngine)
        assert not engine.encrypted

    def test_partial_thebrain_config_rejected(self) -> None:
        with pytest.raises(ValueError, match="thebrain_home_thought_id"):
            build_engine(TokenVaultConfig(thebrain_api_key="key", thebrain_brain_id="brain"))
