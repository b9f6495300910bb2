"""
Tests for configuration classes.
"""

from decimal import Decimal

import pytest

from .. import (
    AgentConfig,
    BaseConfig,
    ChainConfig,
    ConfigError,
    ConfigManager,
    NatsConfig,
    PrivilegedRole,
    ProtocolConfig,
)


class TestBaseConfig:
    def test_invalid_environment(self):
        with pytest.raises(ConfigError):
            BaseConfig(ENVIRONMENT="moon")

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError):
            BaseConfig(LOG_LEVEL="LOUD")

    def test_env_helpers(self, monkeypatch):
        monkeypatch.setenv("MONITOR_TEST_INT", "12")
        monkeypatch.setenv("MONITOR_TEST_BOOL", "yes")

        assert BaseConfig.get_env_int("MONITOR_TEST_INT") == 12
        assert BaseConfig.get_env_bool("MONITOR_TEST_BOOL") is True

    def test_env_helper_errors(self, monkeypatch):
        monkeypatch.setenv("MONITOR_TEST_INT", "twelve")
        monkeypatch.delenv("MONITOR_TEST_MISSING", raising=False)

        with pytest.raises(ConfigError):
            BaseConfig.get_env_int("MONITOR_TEST_INT")
        with pytest.raises(ConfigError):
            BaseConfig.get_env("MONITOR_TEST_MISSING", required=True)


class TestParsers:
    def test_parse_decimal(self):
        assert BaseConfig.parse_decimal("X", "1000000000000") == Decimal(10) ** 12
        assert BaseConfig.parse_decimal("X", 5) == Decimal(5)

    @pytest.mark.parametrize("value", ["lots", "NaN", "Infinity", None])
    def test_parse_decimal_rejects(self, value):
        with pytest.raises(ConfigError):
            BaseConfig.parse_decimal("X", value)

    def test_parse_address(self):
        assert BaseConfig.parse_address("X", "0x1F98431c8aD98523631AE4a59f267346ea31F984") == (
            "0x1f98431c8ad98523631ae4a59f267346ea31f984"
        )

    @pytest.mark.parametrize("value", ["0x1234", "uniswap", None])
    def test_parse_address_rejects(self, value):
        with pytest.raises(ConfigError):
            BaseConfig.parse_address("X", value)


class TestChainConfig:
    def test_reference_token_is_lowercase_usdc(self):
        assert ChainConfig().get_reference_token("ethereum") == "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"

    def test_reference_token_override(self):
        config = ChainConfig(REFERENCE_TOKEN="0x6B175474E89094C44Da98b954EedeAC495271d0F")
        assert config.get_reference_token("base") == "0x6b175474e89094c44da98b954eedeac495271d0f"

    def test_unsupported_chain(self):
        with pytest.raises(ValueError):
            ChainConfig().get_chain_config("solana")

    def test_invalid_reference_token(self):
        with pytest.raises(ConfigError):
            ChainConfig(REFERENCE_TOKEN="usdc")

    def test_invalid_scan_limits(self):
        with pytest.raises(ConfigError):
            ChainConfig(BLOCKS_PER_REQUEST=0)
        with pytest.raises(ConfigError):
            ChainConfig(DEFAULT_CHAIN="solana")


class TestProtocolConfig:
    def test_get_contract(self):
        contract = ProtocolConfig().get_contract("UNI")
        assert contract["abi_file"] == "Uni.json"
        assert contract["role"] is PrivilegedRole.MINTER

    def test_unknown_contract(self):
        with pytest.raises(ConfigError):
            ProtocolConfig().get_contract("Missing")

    def test_factory(self):
        config = ProtocolConfig()
        assert config.get_factory_address("ethereum") == "0x1F98431c8aD98523631AE4a59f267346ea31F984"
        assert config.get_deployment_block("ethereum") == 12369621
        with pytest.raises(ValueError):
            config.get_factory_address("solana")


class TestAgentConfig:
    def test_thresholds(self):
        config = AgentConfig(FLASH_SWAP_THRESHOLD_USDC="5000", LIQUIDITY_THRESHOLD_PERCENT_CHANGE="2.5")
        assert config.flash_swap_threshold == Decimal(5000)
        assert config.liquidity_threshold_percent_change == Decimal("2.5")

    @pytest.mark.parametrize("value", ["-1", "lots"])
    def test_invalid_flash_threshold(self, value):
        with pytest.raises(ConfigError):
            AgentConfig(FLASH_SWAP_THRESHOLD_USDC=value)

    def test_invalid_liquidity_threshold(self):
        with pytest.raises(ConfigError):
            AgentConfig(LIQUIDITY_THRESHOLD_PERCENT_CHANGE="0")

    def test_admin_event_classifications_are_valid(self):
        from ...agents.base import FindingSeverity, FindingType

        for events in AgentConfig().admin_events.values():
            for classification in events.values():
                FindingType(classification["type"])
                FindingSeverity(classification["severity"])


class TestNatsConfig:
    def test_finding_subject(self):
        config = NatsConfig(FINDINGS_SUBJECT="alerts")
        assert config.get_finding_subject("AE-UNISWAP-ADMIN-EVENT") == "alerts.ae-uniswap-admin-event"

    @pytest.mark.parametrize("subject", ["", "uniswap.*", "uniswap.>", "uniswap findings"])
    def test_invalid_findings_subject(self, subject):
        with pytest.raises(ConfigError):
            NatsConfig(FINDINGS_SUBJECT=subject)

    def test_urls_by_environment(self):
        config = NatsConfig()
        assert config.get_nats_url("production") == config.NATS_URL_PRODUCTION
        assert config.get_nats_url("staging") == config.NATS_URL_DEV
        assert config.get_nats_url("unknown") == config.NATS_URL_LOCAL


class TestConfigManager:
    """Test cases for ConfigManager."""

    def test_monitor_config(self, config):
        monitor_config = config.get_monitor_config("ethereum")

        assert monitor_config["chain_id"] == 1
        assert monitor_config["reference_token"] == "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
        assert monitor_config["factory_address"] == "0x1F98431c8aD98523631AE4a59f267346ea31F984"
        assert monitor_config["deployment_block"] == 12369621
        assert monitor_config["blocks_per_request"] == config.chains.BLOCKS_PER_REQUEST
        assert monitor_config["flash_swap_threshold"] == config.agents.flash_swap_threshold

    def test_validate_configuration(self, config):
        assert config.validate_configuration() is True

    def test_environment_override(self):
        assert ConfigManager(environment="test").environment == "test"

    def test_missing_liquidity_pool_fails_validation(self, config):
        config.agents.LIQUIDITY_POOL = "Missing"

        with pytest.raises(ConfigError):
            config.validate_configuration()

    def test_parse_factory(self, config):
        assert config.parse_factory("base") == "0x33128a8fc17869897dce68ed026d694621f6fdfd"
        with pytest.raises(ConfigError):
            config.parse_factory("solana")
