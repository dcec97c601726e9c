"""JSON-RPC market admin client with endpoint fallback."""
from __future__ import annotations

import json
import logging
import ssl
from typing import Any

import aiohttp
import certifi
from solders.keypair import Keypair

from ..config import ClusterConfig
from ..errors import (
    DuplicateResourceError,
    ResourceNotFoundError,
    TransientChainError,
)
from ..models import Bank, Group, RiskParameters, StubOracle

logger = logging.getLogger(__name__)

# JSON-RPC error codes returned by the admin gateway.
DUPLICATE_RESOURCE_CODE = -32010
NOT_FOUND_CODE = -32004


class _RpcErrorResponse(Exception):
    def __init__(self, error: dict[str, Any]) -> None:
        super().__init__(error.get("message", error))
        self.code = error.get("code")
        self.error = error


def canonical_json(value: Any) -> bytes:
    return json.dumps(value, sort_keys=True, separators=(",", ":")).encode()


def _parse_params(raw: dict[str, Any]) -> RiskParameters:
    return RiskParameters(**raw)


def _parse_bank(raw: dict[str, Any]) -> Bank:
    return Bank(
        address=raw["address"],
        group=raw["group"],
        name=raw["name"],
        token_index=int(raw["tokenIndex"]),
        mint=raw["mint"],
        oracle=raw["oracle"],
        params=_parse_params(raw["params"]),
        oracle_conf_filter=float(raw.get("oracleConfFilter", 0.1)),
    )


def _parse_group(raw: dict[str, Any]) -> Group:
    return Group(
        address=raw["address"],
        admin=raw["admin"],
        group_number=int(raw.get("groupNumber", 0)),
        permissionless=bool(raw.get("permissionless", False)),
    )


class RpcMarketClient:
    """Market admin client speaking JSON-RPC to a signing-aware gateway.

    Mutating requests are signed by the admin keypair over the canonical
    JSON encoding of their arguments.

    The endpoints must be an admin gateway that serves the ``admin_*``
    methods and encodes and submits the program instructions itself. A
    plain Solana RPC node does not serve them; use the in-memory ledger
    (``--dry-run``) when no gateway is available.
    """

    def __init__(self, config: ClusterConfig, keypair: Keypair) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.program_id = config.program_id
        self.current_rpc_index = 0
        self._keypair = keypair

    @property
    def admin(self) -> str:
        return str(self._keypair.pubkey())

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
                        if "error" in result:
                            raise _RpcErrorResponse(result["error"])

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result")
            except _RpcErrorResponse as e:
                if e.code == DUPLICATE_RESOURCE_CODE:
                    raise DuplicateResourceError(f"{method}: {e}") from e
                if e.code == NOT_FOUND_CODE:
                    raise ResourceNotFoundError(f"{method}: {e}") from e
                last_error = e
                logger.warning("RPC endpoint %s returned error: %s", rpc_url, e)
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)

            if attempt < len(self.endpoints) - 1:
                logger.info("Trying next endpoint...")

        raise TransientChainError(
            f"All RPC endpoints failed for {method}. Last error: {last_error}"
        )

    async def _signed_call(self, method: str, args: dict[str, Any]) -> Any:
        args = {"programId": self.program_id, **args}
        signature = self._keypair.sign_message(canonical_json(args))
        return await self.rpc_call(
            method, [args, {"signer": self.admin, "signature": str(signature)}]
        )

    # ------------------------------------------------------------------
    # MarketAdminClient
    # ------------------------------------------------------------------

    async def create_group(self, group_number: int, permissionless: bool) -> None:
        await self._signed_call(
            "admin_createGroup",
            {"groupNumber": group_number, "permissionless": permissionless},
        )

    async def get_group_for_admin(self, admin: str, group_number: int = 0) -> Group:
        result = await self.rpc_call(
            "admin_getGroupForAdmin",
            [{"programId": self.program_id, "admin": admin, "groupNumber": group_number}],
        )
        if not result:
            raise ResourceNotFoundError(f"No group {group_number} found for admin {admin}")
        return _parse_group(result)

    async def create_stub_oracle(self, group: Group, mint: str, price: float) -> None:
        await self._signed_call(
            "admin_createStubOracle",
            {"group": group.address, "mint": mint, "price": price},
        )

    async def get_stub_oracle(self, group: Group, mint: str) -> StubOracle:
        result = await self.rpc_call(
            "admin_getStubOracle",
            [{"programId": self.program_id, "group": group.address, "mint": mint}],
        )
        # The gateway returns every stub oracle for the (group, mint) pair.
        if not result:
            raise ResourceNotFoundError(
                f"No stub oracle for {mint} in group {group.address}"
            )
        first = result[0]
        return StubOracle(
            address=first["address"],
            group=group.address,
            mint=mint,
            price=float(first.get("price", 0.0)),
        )

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
        await self._signed_call(
            "admin_tokenRegister",
            {
                "group": group.address,
                "mint": mint,
                "oracle": oracle,
                "oracleConfFilter": oracle_conf_filter,
                "tokenIndex": token_index,
                "name": name,
                "params": list(params.ordered_values()),
                "namedParams": params.as_dict(),
            },
        )

    async def reload_group(self, group: Group) -> Group:
        result = await self.rpc_call(
            "admin_getBanksForGroup",
            [{"programId": self.program_id, "group": group.address}],
        )
        banks = tuple(_parse_bank(raw) for raw in result or [])
        return Group(
            address=group.address,
            admin=group.admin,
            group_number=group.group_number,
            permissionless=group.permissionless,
            banks=banks,
        )
