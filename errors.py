"""
Ledger error kinds.
Every rejected operation raises one of these back to its caller; state is
left exactly as it was before the call.
"""


class LedgerError(Exception):
    """Base class for all ledger rejections."""

    kind = "LedgerError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class Unauthorized(LedgerError):
    """The caller is not allowed to perform a privileged operation."""
    kind = "Unauthorized"


class InvalidArgument(LedgerError):
    """Zero or negative counts, malformed values, or a self-transfer."""
    kind = "InvalidArgument"


class UnknownAsset(LedgerError):
    """The asset id is not present in the registry."""
    kind = "UnknownAsset"

    def __init__(self, asset_id):
        super().__init__(f"Asset {asset_id!r} does not exist")
        self.asset_id = asset_id


class InsufficientPool(LedgerError):
    """A purchase asks for more fractions than the pool holds."""
    kind = "InsufficientPool"


class InsufficientBalance(LedgerError):
    """A sale or transfer exceeds the holder's balance."""
    kind = "InsufficientBalance"


class PaymentMismatch(LedgerError):
    """The attached payment does not equal the required amount."""
    kind = "PaymentMismatch"

    def __init__(self, required: int, attached: int):
        super().__init__(f"Payment of {attached} does not match required amount {required}")
        self.required = required
        self.attached = attached


class TransferFailed(LedgerError):
    """The custody provider rejected a value movement."""
    kind = "TransferFailed"
