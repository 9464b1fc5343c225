import logging

import pytest

from ostium_sdk.signers.base_signer import TransactionOutcome, TxRequest
from ostium_sdk.utils.config import (
    ARBITRUM_CHAIN_ID,
    NetworkConfig,
    get_fordefi_config,
    get_local_credentials,
    load_environment,
)
from ostium_sdk.utils.enums import JobState
from ostium_sdk.utils.exceptions import MissingEnvironmentVariableError, OstiumError, ValidationError
from ostium_sdk.utils.logger import set_global_log_level, setup_logger

from conftest import TRADER

ENV_VARS = [
    "OSTIUM_RPC_URL",
    "ALCHEMY_API_KEY",
    "PRIVATE_KEY",
    "FORDEFI_ACCESS_TOKEN",
    "FORDEFI_PRIVATE_KEY_PEM",
    "FORDEFI_PRIVATE_KEY_PATH",
    "FORDEFI_VAULT_ID",
    "FORDEFI_ADDRESS",
    "FORDEFI_API_BASE_URL",
    "LOG_LEVEL",
    "OSTIUM_LOG_TO_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ------------------------- NetworkConfig ------------------------- #

def test_mainnet_from_alchemy_key(monkeypatch):
    monkeypatch.setenv("ALCHEMY_API_KEY", "secret-key")

    config = NetworkConfig.mainnet()

    assert config.chain_id == ARBITRUM_CHAIN_ID
    assert config.rpc_url.endswith("/v2/secret-key")
    assert config.vault is not None
    assert "secret-key" not in repr(config)


def test_mainnet_prefers_explicit_then_override(monkeypatch):
    monkeypatch.setenv("ALCHEMY_API_KEY", "secret-key")
    monkeypatch.setenv("OSTIUM_RPC_URL", "http://override:8545")

    assert NetworkConfig.mainnet().rpc_url == "http://override:8545"
    assert NetworkConfig.mainnet("http://explicit:8545").rpc_url == "http://explicit:8545"


def test_mainnet_without_rpc_raises():
    with pytest.raises(MissingEnvironmentVariableError):
        NetworkConfig.mainnet()


def test_config_builders_return_new_instances():
    config = NetworkConfig.mainnet("http://a")
    changed = config.with_rpc_url("http://b").with_vault(None)

    assert config.rpc_url == "http://a"
    assert changed.rpc_url == "http://b"
    assert changed.vault is None


# ------------------------- Credentials ------------------------- #

def test_local_credentials(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", "0xabc")
    assert get_local_credentials() == {"private_key": "0xabc"}


def test_local_credentials_missing():
    with pytest.raises(MissingEnvironmentVariableError) as exc_info:
        get_local_credentials()
    assert "PRIVATE_KEY" in str(exc_info.value)


def test_fordefi_config_reads_key_file(monkeypatch, tmp_path, pkcs8_pem):
    key_file = tmp_path / "fordefi.pem"
    key_file.write_text(pkcs8_pem)
    monkeypatch.setenv("FORDEFI_ACCESS_TOKEN", "token")
    monkeypatch.setenv("FORDEFI_PRIVATE_KEY_PATH", str(key_file))
    monkeypatch.setenv("FORDEFI_ADDRESS", TRADER)

    config = get_fordefi_config()

    assert config.private_key_pem == pkcs8_pem
    assert config.address == TRADER
    assert config.vault_id is None
    assert "token" not in repr(config)
    assert "PRIVATE KEY" not in repr(config)


def test_fordefi_config_missing_key(monkeypatch):
    monkeypatch.setenv("FORDEFI_ACCESS_TOKEN", "token")
    with pytest.raises(MissingEnvironmentVariableError):
        get_fordefi_config()


def test_load_environment(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PRIVATE_KEY=0xfromfile\n")
    # Registers PRIVATE_KEY for removal at teardown
    monkeypatch.setenv("PRIVATE_KEY", "placeholder")
    monkeypatch.delenv("PRIVATE_KEY")

    assert load_environment(str(env_file)) is True
    assert get_local_credentials()["private_key"] == "0xfromfile"
    assert load_environment(str(tmp_path / "missing.env")) is False


# ------------------------- Data model ------------------------- #

def test_tx_request_validation():
    tx = TxRequest(to=TRADER.lower(), data=bytearray(b"\x01"))
    assert tx.to == TRADER
    assert tx.data == b"\x01"
    assert tx.with_value(10).value == 10
    assert tx.value == 0

    with pytest.raises(ValidationError):
        TxRequest(to="0x1234")
    with pytest.raises(ValidationError):
        TxRequest(to=TRADER, value=-1)
    with pytest.raises(ValidationError):
        TxRequest(to=TRADER, value=2 ** 256)
    with pytest.raises(ValidationError):
        TxRequest(to=TRADER, gas_limit=0)


def test_transaction_outcome_hex():
    outcome = TransactionOutcome(bytes.fromhex("cd" * 32))
    assert str(outcome) == "0x" + "cd" * 32
    with pytest.raises(ValidationError):
        TransactionOutcome(b"\x01")


def test_job_state_classification():
    assert JobState.parse("error_signing").is_failure
    assert JobState.parse("cancelled").is_failure
    assert not JobState.parse("stuck").is_failure
    assert not JobState.parse("completed").is_failure
    assert JobState.parse("something_new") is None


def test_error_context_in_message():
    error = OstiumError("Failed", operation="create transaction", status=400, body="x" * 1000)
    assert len(error.body) == 300
    text = str(error)
    assert "operation=create transaction" in text
    assert "status=400" in text


# ------------------------- Logging ------------------------- #

def test_setup_logger_does_not_duplicate_handlers():
    first = setup_logger("ostium.test.dedupe")
    second = setup_logger("ostium.test.dedupe")
    assert first is second
    assert len(second.handlers) == 1


def test_set_global_log_level():
    logger = setup_logger("ostium.test.level", level="INFO")
    set_global_log_level("ERROR")
    assert logger.level == logging.ERROR
    set_global_log_level("INFO")


def test_setup_logger_repeat_call_updates_handler_level():
    setup_logger("ostium.test.handler_level", level="INFO")
    logger = setup_logger("ostium.test.handler_level", level="DEBUG")

    assert logger.level == logging.DEBUG
    assert [handler.level for handler in logger.handlers] == [logging.DEBUG]
