"""Chain client protocol — administrative operations on a lending market."""
from typing import Protocol

from ..models import Group, RiskParameters, StubOracle


class MarketAdminClient(Protocol):
    """Abstract interface for creating and reading back market state.

    Mutating calls raise ``DuplicateResourceError`` when the resource
    already exists and ``TransientChainError`` on network failure.
    Read-backs raise ``ResourceNotFoundError`` when nothing is found.
    """

    @property
    def admin(self) -> str: ...

    async def create_group(self, group_number: int, permissionless: bool) -> None: ...

    async def get_group_for_admin(self, admin: str, group_number: int = 0) -> Group: ...

    async def create_stub_oracle(self, group: Group, mint: str, price: float) -> None: ...

    async def get_stub_oracle(self, group: Group, mint: str) -> StubOracle: ...

    async def register_token(
        self,
        group: Group,
        mint: str,
        oracle: str,
        oracle_conf_filter: float,
        token_index: int,
        name: str,
        params: RiskParameters,
    ) -> None: ...

    async def reload_group(self, group: Group) -> Group: ...
