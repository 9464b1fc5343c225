import json
from typing import Any, Dict, List, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from web3 import Web3

from ostium_sdk.chain import ChainReader
from ostium_sdk.signers.base_signer import TransactionOutcome, TransactionSigner, TxRequest

TRADER = Web3.to_checksum_address("0x1111111111111111111111111111111111111111")
VAULT_ADDRESS = Web3.to_checksum_address("0x2222222222222222222222222222222222222222")
TX_HASH_HEX = "0x" + "ab" * 32


# ------------------------- HTTP fakes ------------------------- #

class FakeResponse:
    def __init__(self, json_data: Any = None, status_code: int = 200, text: Optional[str] = None):
        self._json = json_data
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(json_data)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """
    Stand-in for ``requests.Session``.

    Responses are served in order; once the queue is empty ``default`` is
    returned forever. An exception instance in the queue is raised instead.
    """

    def __init__(self, responses: Optional[List[Any]] = None, default: Any = None):
        self.responses = list(responses or [])
        self.default = default
        self.requests: List[Dict[str, Any]] = []
        self.headers: Dict[str, str] = {}

    def request(self, method: str, url: str, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        if self.responses:
            response = self.responses.pop(0)
        else:
            response = self.default
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self.request("POST", url, **kwargs)


# ------------------------- Chain fakes ------------------------- #

class FakeReader:
    """
    ``ChainReader`` replacement answering ``call_function`` by function name.

    Each entry of ``responses`` is either a value or a callable taking the
    call arguments.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = dict(responses or {})
        self.calls: List[tuple] = []

    async def call_function(self, to: str, function, *args):
        self.calls.append((to, function.name, args))
        response = self.responses[function.name]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*args)
        return response

    async def get_balance(self, address: str) -> int:
        self.calls.append((address, "eth_getBalance", ()))
        return self.responses.get("eth_getBalance", 0)

    async def get_receipt(self, tx_hash):
        return self.responses.get("receipt")


class FakeSigner(TransactionSigner):
    """Signer that records submitted requests and returns a fixed hash."""

    def __init__(self, reader: Any = None, address: str = TRADER):
        super().__init__("fake", receipt_poll_interval=0, receipt_max_attempts=3)
        self._address = address
        self._reader = reader or FakeReader()
        self.submitted: List[TxRequest] = []

    @property
    def address(self) -> str:
        return self._address

    @property
    def chain_reader(self) -> ChainReader:
        return self._reader

    async def submit(self, tx: TxRequest) -> TransactionOutcome:
        self.submitted.append(tx)
        return TransactionOutcome(TX_HASH_HEX)


# ------------------------- Fixtures ------------------------- #

@pytest.fixture
def p256_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def pkcs8_pem(p256_key) -> str:
    return p256_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def sec1_pem(p256_key) -> str:
    return p256_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    ).decode()

