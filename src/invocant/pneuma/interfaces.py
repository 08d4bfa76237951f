"""
Bundled contract interfaces.

Human-readable declarations for the ERC-20 surface and the WETH example
program (an ERC-20 plus deposit/withdraw and two summing helpers).
"""

from __future__ import annotations

from .abi import InterfaceRegistry

ERC20_INTERFACE: tuple[str, ...] = (
    "function name() external pure returns (string memory)",
    "function symbol() external pure returns (string memory)",
    "function decimals() external pure returns (uint8)",
    "function totalSupply() external view returns (uint256)",
    "function balanceOf(address _address) external view returns (uint256)",
    "function transfer(address to, uint256 value) external returns (bool)",
    "function approve(address spender, uint256 value) external returns (bool)",
    "function transferFrom(address from, address to, uint256 value) external returns (bool)",
    "function allowance(address owner, address spender) external view returns (uint256)",
)

WETH_INTERFACE: tuple[str, ...] = ERC20_INTERFACE + (
    "function deposit() external payable",
    "function withdraw(uint256 amount) external",
    "function sum(uint256[] memory values) external pure returns (string memory, uint256)",
    "function sumWithHelper(address helper, uint256[] memory values) external view returns (uint256)",
)

BUNDLED_INTERFACES: dict[str, tuple[str, ...]] = {
    "erc20": ERC20_INTERFACE,
    "weth": WETH_INTERFACE,
}


def bundled_registry(name: str) -> InterfaceRegistry:
    """Build a registry for one of the bundled interfaces."""
    try:
        lines = BUNDLED_INTERFACES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown interface {name!r}. Available: {', '.join(sorted(BUNDLED_INTERFACES))}"
        ) from None
    return InterfaceRegistry.from_human_readable(lines)
