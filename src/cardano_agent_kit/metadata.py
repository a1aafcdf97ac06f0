"""
Mint Metadata Utilities

Prepares auxiliary data for minted assets:
- CIP-25: NFT metadata (label 721)
- Label 20: fungible token metadata, same layout under label 20

Reference:
- CIP-25: https://cips.cardano.org/cips/cip25/
- Cardano Metadata: https://developers.cardano.org/docs/transaction-metadata/
"""

from typing import Any

import pycardano as pc

from cardano_agent_kit.config import METADATA_STRING_MAX_BYTES
from cardano_agent_kit.enums import MintLabel


def split_metadata_string(text: str, max_bytes: int = METADATA_STRING_MAX_BYTES) -> list[str]:
    """
    Split a string into chunks that don't exceed max_bytes.

    Splits on word boundaries where possible; single words longer than the
    limit (URLs, base64) are cut on character boundaries.

    Args:
        text: String to split
        max_bytes: Maximum UTF-8 bytes per chunk (default 64)

    Returns:
        List of strings, each ≤ max_bytes
    """
    if len(text.encode("utf-8")) <= max_bytes:
        return [text]

    chunks = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if len(candidate.encode("utf-8")) <= max_bytes:
            current = candidate
            continue

        if current:
            chunks.append(current)
        current = ""

        # Word alone is over the limit
        while len(word.encode("utf-8")) > max_bytes:
            cut = max_bytes
            while len(word[:cut].encode("utf-8")) > max_bytes:
                cut -= 1
            chunks.append(word[:cut])
            word = word[cut:]
        current = word

    if current:
        chunks.append(current)
    return chunks


def fit_metadata_value(value: Any) -> Any:
    """Chunk over-long strings (and strings inside lists) to the metadata limit"""
    if isinstance(value, str):
        chunks = split_metadata_string(value)
        return chunks[0] if len(chunks) == 1 else chunks
    if isinstance(value, list):
        return [chunk for item in value for chunk in (split_metadata_string(item) if isinstance(item, str) else [item])]
    return value


def build_asset_metadata(
    policy_id: str, asset_name: str, fields: dict[str, Any], label: MintLabel = MintLabel.NFT
) -> dict:
    """
    Build the label → policy → asset metadata structure

    Args:
        policy_id: Policy ID (hex)
        asset_name: Asset name as text
        fields: Asset fields (name, image, mediaType, description, ...)
        label: "721" for NFTs, "20" for fungible tokens

    Returns:
        Metadata dict with string label keys

    Format:
        {
            "721": {
                "<policy_id>": {"<asset_name>": {...fields}},
                "version": "1.0"
            }
        }
    """
    asset_fields = {key: fit_metadata_value(value) for key, value in fields.items() if value is not None}
    return {
        label.value: {
            policy_id: {asset_name: asset_fields},
            "version": "1.0",
        }
    }


def prepare_mint_metadata(
    policy_id: str, asset_name: str, fields: dict[str, Any], label: MintLabel = MintLabel.NFT
) -> pc.AuxiliaryData:
    """
    Prepare auxiliary data for a mint transaction.

    Returns:
        AuxiliaryData ready to attach to the transaction
    """
    metadata = build_asset_metadata(policy_id, asset_name, fields, label)

    # PyCardano requires integer labels at the top level only
    metadata_obj = pc.Metadata({int(key): value for key, value in metadata.items()})
    alonzo_metadata = pc.AlonzoMetadata(metadata=metadata_obj)

    return pc.AuxiliaryData(alonzo_metadata)
