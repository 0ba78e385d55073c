# mintgate/abi.py
"""Launchpad ABI fragments used to build mint call data."""
from typing import Any, Dict, List

_MINT_PARAM = {
    "name": "param", "type": "tuple",
    "internalType": "struct ILaunchpadStructs.MintParam",
    "components": [
        {"name": "nftContract", "type": "address"},
        {"name": "recipient", "type": "address"},
        {"name": "mintQuantity", "type": "uint256"},
        {"name": "isMintAllPossible", "type": "bool"},
        {"name": "stageIndex", "type": "uint8"},
        {"name": "extraData", "type": "bytes"},
    ],
}

def launchpad_abi() -> List[Dict[str, Any]]:
    # mintPublic, mintAllowList, execute
    return [
        {"name": "mintPublic", "type": "function", "stateMutability": "payable",
         "inputs": [_MINT_PARAM], "outputs": []},
        {"name": "mintAllowList", "type": "function", "stateMutability": "payable",
         "inputs": [_MINT_PARAM], "outputs": []},
        {"name": "execute", "type": "function", "stateMutability": "payable",
         "inputs": [{"name": "stageType", "type": "uint8"}, {"name": "data", "type": "bytes"}],
         "outputs": [{"name": "", "type": "bytes"}]},
    ]
