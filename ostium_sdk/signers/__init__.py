from ostium_sdk.signers.base_signer import Receipt, TransactionOutcome, TransactionSigner, TxRequest
from ostium_sdk.signers.fordefi_signer import CustodialSigningJob, FordefiSigner
from ostium_sdk.signers.local_signer import LocalSigner

__all__ = [
    "TransactionSigner",
    "TxRequest",
    "TransactionOutcome",
    "Receipt",
    "LocalSigner",
    "FordefiSigner",
    "CustodialSigningJob",
]
