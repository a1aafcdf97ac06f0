"""
Transaction Intents

High-level requests the transaction orchestrator turns into submitted
transactions. Each intent carries only what its build rule needs.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from cardano_agent_kit.enums import MintLabel


POSITIVE_QUANTITY_PATTERN = r"^0*[1-9]\d*$"


class MintMetadata(BaseModel):
    """
    CIP-25 style metadata for a minted asset

    Extra fields are kept and written to the metadata as-is.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(min_length=1)
    image: str = Field(min_length=1)
    media_type: str = Field(alias="mediaType", min_length=1)
    description: str | list[str]


class SendValueIntent(BaseModel):
    """Send lovelace to a recipient"""

    kind: Literal["send_value"] = "send_value"
    recipient: str = Field(min_length=1)
    amount: str = Field(pattern=POSITIVE_QUANTITY_PATTERN, description="Amount in lovelace")


class SendAssetIntent(BaseModel):
    """Send a native asset to a recipient"""

    kind: Literal["send_asset"] = "send_asset"
    recipient: str = Field(min_length=1)
    unit: str = Field(min_length=57)
    quantity: str = Field(pattern=POSITIVE_QUANTITY_PATTERN)


class MintAssetIntent(BaseModel):
    """Mint an asset under the wallet's one-signature policy"""

    kind: Literal["mint_asset"] = "mint_asset"
    asset_name: str = Field(min_length=1, max_length=32)
    quantity: str = Field("1", pattern=POSITIVE_QUANTITY_PATTERN)
    recipient: str = Field(min_length=1)
    metadata: MintMetadata
    label: MintLabel = MintLabel.NFT


class BurnAssetIntent(BaseModel):
    """Burn an asset minted under the wallet's one-signature policy"""

    kind: Literal["burn_asset"] = "burn_asset"
    unit: str = Field(min_length=57)
    quantity: str = Field(pattern=POSITIVE_QUANTITY_PATTERN)


class RegisterAndStakeIntent(BaseModel):
    """Register the wallet's reward address if needed and delegate to a pool"""

    kind: Literal["register_and_stake"] = "register_and_stake"
    pool_id: str = Field(min_length=1, description="Bech32 pool id (pool1...) or hex pool key hash")


TransactionIntent = Annotated[
    SendValueIntent | SendAssetIntent | MintAssetIntent | BurnAssetIntent | RegisterAndStakeIntent,
    Field(discriminator="kind"),
]


def describe_intent(intent: TransactionIntent) -> str:
    """Human-readable operation description used in logs and error messages"""
    if isinstance(intent, SendValueIntent):
        return f"sending {intent.amount} lovelace to {intent.recipient}"
    if isinstance(intent, SendAssetIntent):
        return f"sending {intent.quantity} of {intent.unit} to {intent.recipient}"
    if isinstance(intent, MintAssetIntent):
        return f"minting {intent.quantity} {intent.asset_name} for {intent.recipient}"
    if isinstance(intent, BurnAssetIntent):
        return f"burning {intent.quantity} of {intent.unit}"
    return f"staking to pool {intent.pool_id}"
