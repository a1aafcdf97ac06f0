"""
Result Schemas

Pydantic models for the caller-facing shapes returned by balance, history
and transaction operations. Quantities are decimal strings.
"""

from pydantic import BaseModel, ConfigDict, Field

from cardano_agent_kit.enums import IntentKind, NetworkType


QUANTITY_PATTERN = r"^\d+$"


class AssetAmount(BaseModel):
    """Quantity of one asset unit"""

    unit: str = Field(description="Asset unit (policy id + hex asset name, or lovelace)")
    quantity: str = Field(pattern=QUANTITY_PATTERN, description="Amount as a decimal string")


class AssetRecord(BaseModel):
    """Wallet holding of a single asset"""

    unit: str = Field(description="Opaque on-chain asset identifier")
    quantity: str = Field(pattern=QUANTITY_PATTERN, description="Amount held (as string for large numbers)")
    policy_id: str | None = Field(None, description="Policy ID (None for the native currency)")
    asset_name: str = Field(description="Human-readable asset name")
    metadata: dict | None = Field(None, description="Asset metadata, when available")


class UtxoRecord(BaseModel):
    """Transaction input or output"""

    model_config = ConfigDict(extra="ignore")

    address: str
    amount: list[AssetAmount] = Field(default_factory=list)
    tx_hash: str | None = None
    output_index: int | None = None
    data_hash: str | None = None
    inline_datum: str | None = None
    reference_script_hash: str | None = None
    collateral: bool = False
    reference: bool = False


class TransactionRecord(BaseModel):
    """Normalized history entry: transaction info merged with its UTxOs"""

    model_config = ConfigDict(extra="ignore")

    hash: str = Field(description="Transaction hash")
    block: str | None = Field(None, description="Block hash")
    block_height: int | None = None
    block_time: int | None = Field(None, description="Block creation time (UNIX seconds)")
    slot: int | None = None
    index: int | None = Field(None, description="Transaction index within the block")
    output_amount: list[AssetAmount] = Field(default_factory=list)
    fees: str | None = Field(None, description="Fees in lovelace")
    deposit: str | None = Field(None, description="Deposit in lovelace")
    size: int | None = Field(None, description="Size in bytes")
    valid_contract: bool | None = None
    inputs: list[UtxoRecord] = Field(default_factory=list)
    outputs: list[UtxoRecord] = Field(default_factory=list)


class TransactionResult(BaseModel):
    """Outcome of a submitted transaction"""

    tx_hash: str = Field(description="Transaction hash")
    operation: IntentKind | None = Field(None, description="Intent that produced the transaction")
    network: NetworkType
    explorer_url: str
