"""
dex/interface.py - Capability set every routable liquidity source exposes.

The router treats all sources uniformly through this interface:
discover -> required_accounts -> refresh/update -> quote -> build.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from solders.pubkey import Pubkey

from core.constants import Direction
from core.models import InstructionPlan, Quote, SwapParams, UserAccounts, VaultSnapshot


class LiquiditySource(ABC):
    """Host-facing liquidity source."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable name. Display and logging only."""

    @property
    @abstractmethod
    def key(self) -> Pubkey:
        """Stable identifier of the source."""

    @property
    @abstractmethod
    def program_id(self) -> Pubkey:
        ...

    @property
    @abstractmethod
    def reserve_mints(self) -> list[Pubkey]:
        ...

    @property
    @abstractmethod
    def accounts_len(self) -> int:
        """Number of account metas a swap through this source adds."""

    @abstractmethod
    def required_accounts(self) -> frozenset[Pubkey]:
        ...

    @abstractmethod
    def refresh(self, data: bytes, slot: Optional[int] = None) -> VaultSnapshot:
        ...

    @abstractmethod
    def update(self, account_map: Mapping[Pubkey, bytes], slot: Optional[int] = None) -> VaultSnapshot:
        ...

    @abstractmethod
    def quote(self, amount_in: int) -> Quote:
        ...

    @abstractmethod
    def build(self, amount_in: int, direction: Direction, user_accounts: UserAccounts) -> InstructionPlan:
        ...

    @abstractmethod
    def build_swap(self, swap_params: SwapParams) -> InstructionPlan:
        ...

    @abstractmethod
    def clone(self) -> "LiquiditySource":
        ...
