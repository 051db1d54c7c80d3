"""
WalletConnection: owned handle for the RPC provider and buyer account.

Lifecycle: UNINITIALIZED -> CONNECTING -> READY -> (ERROR | DISCONNECTED).
A connection in ERROR or DISCONNECTED may connect() again.
"""
from __future__ import annotations

import logging
from enum import Enum

from web3 import AsyncHTTPProvider, AsyncWeb3

from herstories.chain.config import get_chain_id, get_network_name, get_rpc_url

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    ERROR = "error"
    DISCONNECTED = "disconnected"


class WalletConnectionError(Exception):
    pass


class WalletConnection:
    def __init__(
        self,
        w3: AsyncWeb3 | None = None,
        *,
        rpc_url: str | None = None,
        expected_chain_id: int | None = None,
    ) -> None:
        self._w3 = w3
        self._rpc_url = rpc_url or get_rpc_url()
        self.expected_chain_id = expected_chain_id if expected_chain_id is not None else get_chain_id()
        self.state = ConnectionState.UNINITIALIZED
        self.account: str | None = None
        self.chain_id: int | None = None
        self.error: str | None = None

    @property
    def is_ready(self) -> bool:
        return self.state == ConnectionState.READY

    @property
    def w3(self) -> AsyncWeb3:
        if self._w3 is None or not self.is_ready:
            raise WalletConnectionError("Wallet not connected")
        return self._w3

    async def connect(self) -> bool:
        """Request accounts and check the network. Returns False and enters ERROR on failure."""
        if self.is_ready:
            return True
        self._set_state(ConnectionState.CONNECTING)
        self.error = None
        try:
            if self._w3 is None:
                self._w3 = AsyncWeb3(AsyncHTTPProvider(self._rpc_url))
            accounts = await self.request_accounts()
            if not accounts:
                raise WalletConnectionError("No accounts found. Unlock a wallet account first.")
            chain_id = await self.get_network()
            if self.expected_chain_id and chain_id != self.expected_chain_id:
                raise WalletConnectionError(
                    f"Wrong network: chain id {chain_id}, switch to "
                    f"{get_network_name()} (chain id {self.expected_chain_id})"
                )
        except Exception as e:
            self.error = str(e)
            self.account = None
            self._set_state(ConnectionState.ERROR)
            logger.warning("wallet_connect_failed", extra={"error": self.error})
            return False

        self.account = accounts[0]
        self.chain_id = chain_id
        self._set_state(ConnectionState.READY)
        logger.info("wallet_connected", extra={"account": self.account, "chain_id": chain_id})
        return True

    def disconnect(self) -> None:
        self.account = None
        self.chain_id = None
        self._set_state(ConnectionState.DISCONNECTED)

    async def request_accounts(self) -> list[str]:
        return list(await self._w3.eth.accounts)

    async def get_network(self) -> int:
        return int(await self._w3.eth.chain_id)

    def _set_state(self, new_state: ConnectionState) -> None:
        old_state = self.state
        self.state = new_state
        if old_state != new_state:
            logger.debug(
                "wallet_state_change",
                extra={"old_state": old_state.value, "new_state": new_state.value},
            )
