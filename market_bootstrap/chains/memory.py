"""In-memory market ledger — authoritative store for dry runs and tests."""
from __future__ import annotations

import logging
import struct
from dataclasses import replace

from solders.pubkey import Pubkey

from ..errors import DuplicateResourceError, ResourceNotFoundError
from ..models import Bank, Group, RiskParameters, StubOracle

logger = logging.getLogger(__name__)


class InMemoryMarketClient:
    """Implements ``MarketAdminClient`` against process-local dicts.

    Addresses are program-derived from the same seeds the on-chain
    program uses, so they are stable across runs for a given admin.
    """

    def __init__(self, admin: str, program_id: str) -> None:
        self._admin = admin
        self._admin_key = Pubkey.from_string(admin)
        self._program_id = Pubkey.from_string(program_id)
        self._groups: dict[str, Group] = {}
        self._stub_oracles: dict[tuple[str, str], StubOracle] = {}
        self._banks: dict[tuple[str, int], Bank] = {}

    @property
    def admin(self) -> str:
        return self._admin

    # ------------------------------------------------------------------
    # Address derivation
    # ------------------------------------------------------------------

    def _derive(self, *seeds: bytes) -> str:
        address, _bump = Pubkey.find_program_address(list(seeds), self._program_id)
        return str(address)

    def group_address(self, group_number: int) -> str:
        return self._derive(
            b"Group", bytes(self._admin_key), struct.pack("<I", group_number)
        )

    def stub_oracle_address(self, group: str, mint: str) -> str:
        return self._derive(
            bytes(Pubkey.from_string(group)),
            b"StubOracle",
            bytes(Pubkey.from_string(mint)),
        )

    def bank_address(self, group: str, token_index: int, bank_num: int = 0) -> str:
        return self._derive(
            bytes(Pubkey.from_string(group)),
            b"Bank",
            struct.pack("<H", token_index),
            struct.pack("<Q", bank_num),
        )

    # ------------------------------------------------------------------
    # MarketAdminClient
    # ------------------------------------------------------------------

    async def create_group(self, group_number: int, permissionless: bool) -> None:
        address = self.group_address(group_number)
        if address in self._groups:
            raise DuplicateResourceError(
                f"Group {group_number} already exists for admin {self._admin}"
            )
        self._groups[address] = Group(
            address=address,
            admin=self._admin,
            group_number=group_number,
            permissionless=permissionless,
        )
        logger.debug("Created group %s", address)

    async def get_group_for_admin(self, admin: str, group_number: int = 0) -> Group:
        for group in self._groups.values():
            if group.admin == admin and group.group_number == group_number:
                return group
        raise ResourceNotFoundError(
            f"No group {group_number} found for admin {admin}"
        )

    async def create_stub_oracle(self, group: Group, mint: str, price: float) -> None:
        self._require_group(group)
        key = (group.address, mint)
        if key in self._stub_oracles:
            raise DuplicateResourceError(
                f"Stub oracle for {mint} already exists in group {group.address}"
            )
        self._stub_oracles[key] = StubOracle(
            address=self.stub_oracle_address(group.address, mint),
            group=group.address,
            mint=mint,
            price=price,
        )

    async def get_stub_oracle(self, group: Group, mint: str) -> StubOracle:
        try:
            return self._stub_oracles[(group.address, mint)]
        except KeyError:
            raise ResourceNotFoundError(
                f"No stub oracle for {mint} in group {group.address}"
            ) from None

    async def register_token(
        self,
        group: Group,
        mint: str,
        oracle: str,
        oracle_conf_filter: float,
        token_index: int,
        name: str,
        params: RiskParameters,
    ) -> None:
        self._require_group(group)
        key = (group.address, token_index)
        if key in self._banks:
            raise DuplicateResourceError(
                f"Token index {token_index} already registered in group {group.address}"
            )
        self._banks[key] = Bank(
            address=self.bank_address(group.address, token_index),
            group=group.address,
            name=name,
            token_index=token_index,
            mint=mint,
            oracle=oracle,
            params=params,
            oracle_conf_filter=oracle_conf_filter,
        )

    async def reload_group(self, group: Group) -> Group:
        stored = self._require_group(group)
        banks = tuple(
            bank
            for (group_address, _), bank in self._banks.items()
            if group_address == stored.address
        )
        return replace(stored, banks=banks)

    def _require_group(self, group: Group) -> Group:
        try:
            return self._groups[group.address]
        except KeyError:
            raise ResourceNotFoundError(f"Unknown group {group.address}") from None
