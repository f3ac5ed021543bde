"""
Token Minter

Owns the lifecycle of the proof-of-origin token for one content binding:

    empty -> cold_start -> minted

A cheap cold-start token is produced first so the adapter always has
something to send; the high-quality token replaces it once the minting
engine delivers. Minting failures are logged and absorbed, a missing token
never blocks playback on its own.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import unquote

from .events import PlayerEvents
from .exceptions import TokenMintingError
from .interfaces import MintingEngine
from .log_config import get_context_logger


class TokenState(str, Enum):
    """Token lifecycle state for a binding."""

    EMPTY = "empty"
    COLD_START = "cold_start"
    MINTED = "minted"


@dataclass
class TokenRecord:
    """Tokens minted for one content binding."""

    binding: str = ""
    state: TokenState = TokenState.EMPTY
    cold_start_token: Optional[str] = None
    minted_token: Optional[str] = None

    def best_token(self) -> str:
        """Minted token, else cold-start token, else an empty string."""
        return self.minted_token or self.cold_start_token or ""


class TokenMinter:
    """
    Mints proof-of-origin tokens with at most one mint in flight.

    A call arriving while a mint is running returns immediately with the
    current best token instead of waiting; callers that need the fresh
    token read ``record`` after the running mint settles.

    Examples:
        >>> minter = TokenMinter(engine)
        >>> await minter.init()
        >>> token = await minter.mint_for_binding("dQw4w9WgXcQ")
    """

    def __init__(self, engine: MintingEngine):
        self.engine = engine
        self.record = TokenRecord()
        self._lock = asyncio.Lock()
        self.logger = get_context_logger("token_minter")

    @property
    def is_locked(self) -> bool:
        return self._lock.locked()

    @property
    def has_minted_token(self) -> bool:
        return self.record.minted_token is not None

    async def init(self) -> None:
        await self.engine.init()

    def dispose(self) -> None:
        self.engine.dispose()
        self.invalidate()

    def bind(self, binding: str) -> TokenRecord:
        """
        Scope the minter to a content binding.

        A different binding invalidates the current tokens and starts a
        fresh record; the same binding keeps the existing one.
        """
        if binding != self.record.binding:
            self.record = TokenRecord(binding=binding)
        return self.record

    def invalidate(self) -> None:
        """Drop all tokens; the next ``bind`` starts from an empty record."""
        self.record = TokenRecord()

    def best_token(self) -> str:
        return self.record.best_token()

    async def mint_for_binding(self, binding: str) -> str:
        """
        Mint tokens for ``binding``.

        Args:
            binding: Content binding (content id) the token is scoped to

        Returns:
            str: Best available token after this call; never raises
        """
        if not binding:
            return ""

        record = self.bind(binding)

        if self._lock.locked():
            self.logger.debug("Token mint already in flight, skipping", binding=binding)
            return self.best_token()

        async with self._lock:
            try:
                cold_start = self.engine.mint_cold_start_token(binding)
                if record is self.record:
                    record.cold_start_token = cold_start
                    if record.state is TokenState.EMPTY:
                        record.state = TokenState.COLD_START
                    self.logger.debug(PlayerEvents.TOKEN_COLD_START, binding=binding)

                minted = await self._mint_integrity_token(binding)
                if minted is not None:
                    if record is self.record:
                        record.minted_token = minted
                        record.state = TokenState.MINTED
                        self.logger.info(PlayerEvents.TOKEN_MINTED, binding=binding)
                    else:
                        self.logger.debug("Discarding token for replaced binding", binding=binding)
            except TokenMintingError as e:
                self.logger.error(PlayerEvents.TOKEN_FAILED, binding=binding, error=str(e))
            except Exception as e:
                self.logger.exception(
                    PlayerEvents.TOKEN_FAILED, binding=binding, error=str(e)
                )

        return self.best_token()

    async def _mint_integrity_token(self, binding: str) -> Optional[str]:
        try:
            if not self.engine.is_initialized():
                await self.engine.reinit()

            minter = self.engine.integrity_minter
            if minter is None:
                return None
            return await minter.mint_as_websafe_string(unquote(binding))
        except Exception as e:
            raise TokenMintingError(
                f"Minting engine failed: {e}", binding=binding, engine_error=e
            ) from e


__all__ = ["TokenState", "TokenRecord", "TokenMinter"]
