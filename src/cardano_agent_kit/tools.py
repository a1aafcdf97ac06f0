"""
Agent Tools

Named, schema-described actions over a CardanoAgentKit for agent frameworks.
The adapter validates parameters and translates failures into
ToolExecutionError; business rules stay in the kit.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, Field

from cardano_agent_kit.enums import MintLabel
from cardano_agent_kit.exceptions import ToolExecutionError
from cardano_agent_kit.intents import POSITIVE_QUANTITY_PATTERN, MintMetadata
from cardano_agent_kit.kit import CardanoAgentKit


logger = logging.getLogger(__name__)


# ============================================================================
# Parameter models
# ============================================================================


class NoParams(BaseModel):
    pass


class SendLovelaceParams(BaseModel):
    recipient: str = Field(description="Recipient address (bech32)")
    amount: str = Field(pattern=POSITIVE_QUANTITY_PATTERN, description="Amount in lovelace (1 ADA = 1000000)")


class SendAssetParams(BaseModel):
    recipient: str = Field(description="Recipient address (bech32)")
    unit: str = Field(min_length=57, description="Asset unit: policy id followed by hex asset name")
    quantity: str = Field(pattern=POSITIVE_QUANTITY_PATTERN)


class MintAssetParams(BaseModel):
    asset_name: str = Field(min_length=1, max_length=32, description="Asset name as text")
    metadata: MintMetadata
    recipient: str | None = Field(None, description="Receiving address (defaults to the wallet address)")
    quantity: str = Field("1", pattern=POSITIVE_QUANTITY_PATTERN)
    label: MintLabel = Field(MintLabel.NFT, description='"721" for NFTs, "20" for fungible tokens')


class BurnAssetParams(BaseModel):
    unit: str = Field(min_length=57, description="Asset unit minted by this wallet")
    quantity: str = Field(pattern=POSITIVE_QUANTITY_PATTERN)


class StakeParams(BaseModel):
    pool_id: str = Field(description="Stake pool id (pool1... or hex)")


class SignAndSendParams(BaseModel):
    tx_cbor: str = Field(description="Unsigned transaction CBOR (hex)")


# ============================================================================
# Actions
# ============================================================================


def _dump(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, list):
        return [_dump(item) for item in result]
    return result


@dataclass
class CardanoAction:
    """Named operation an agent can call"""

    name: str
    description: str
    parameters: type[BaseModel]
    action: Callable[[Any, CardanoAgentKit], Awaitable[Any]]


DEFAULT_ACTIONS: list[CardanoAction] = [
    CardanoAction(
        name="get_address",
        description="Get the wallet's receiving address",
        parameters=NoParams,
        action=lambda params, kit: kit.get_address(),
    ),
    CardanoAction(
        name="get_balance",
        description="Get the wallet's ADA and native asset balance",
        parameters=NoParams,
        action=lambda params, kit: kit.get_balance(),
    ),
    CardanoAction(
        name="get_transaction_history",
        description="List transactions involving the wallet address",
        parameters=NoParams,
        action=lambda params, kit: kit.get_transaction_history(),
    ),
    CardanoAction(
        name="send_lovelace",
        description="Send lovelace to an address",
        parameters=SendLovelaceParams,
        action=lambda params, kit: kit.send_lovelace(params.recipient, params.amount),
    ),
    CardanoAction(
        name="send_asset",
        description="Send a native asset to an address",
        parameters=SendAssetParams,
        action=lambda params, kit: kit.send_asset(params.recipient, params.unit, params.quantity),
    ),
    CardanoAction(
        name="mint_asset",
        description="Mint an NFT or fungible token with CIP-25 metadata",
        parameters=MintAssetParams,
        action=lambda params, kit: kit.mint_asset(
            params.asset_name,
            params.metadata.model_dump(by_alias=True),
            params.recipient,
            params.quantity,
            params.label.value,
        ),
    ),
    CardanoAction(
        name="burn_asset",
        description="Burn an asset minted by this wallet",
        parameters=BurnAssetParams,
        action=lambda params, kit: kit.burn_asset(params.unit, params.quantity),
    ),
    CardanoAction(
        name="register_and_stake",
        description="Register the wallet's stake address if needed and delegate to a pool",
        parameters=StakeParams,
        action=lambda params, kit: kit.register_and_stake(params.pool_id),
    ),
    CardanoAction(
        name="sign_and_send_tx",
        description="Sign and submit an unsigned transaction",
        parameters=SignAndSendParams,
        action=lambda params, kit: kit.sign_and_send(params.tx_cbor),
    ),
]


def tool_schemas(actions: list[CardanoAction] | None = None) -> list[dict[str, Any]]:
    """JSON tool definitions (name, description, input_schema) for each action"""
    return [
        {
            "name": action.name,
            "description": action.description,
            "input_schema": action.parameters.model_json_schema(),
        }
        for action in actions or DEFAULT_ACTIONS
    ]


def create_tool_handlers(
    kit: CardanoAgentKit, actions: list[CardanoAction] | None = None
) -> dict[str, Callable[[dict[str, Any]], Awaitable[Any]]]:
    """
    Create async handlers keyed by tool name

    Each handler takes the raw parameter dict, validates it against the
    action's parameter model and returns a JSON-compatible result.

    Raises (from handlers):
        ToolExecutionError: On invalid parameters or a failed operation
    """

    def make_handler(action: CardanoAction):
        async def handler(params: dict[str, Any] | None = None) -> Any:
            logger.info(f"Executing {action.name}")
            try:
                validated = action.parameters.model_validate(params or {})
                result = _dump(await action.action(validated, kit))
            except Exception as e:
                logger.error(f"Error executing {action.name}: {e}")
                raise ToolExecutionError(action.name, e) from e

            logger.info(f"{action.name} completed")
            return result

        return handler

    return {action.name: make_handler(action) for action in actions or DEFAULT_ACTIONS}
