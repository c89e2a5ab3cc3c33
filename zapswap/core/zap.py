"""
Zap engine: single asset in, pool shares out.

Orchestration per request:
- Validate the input amount (fail-fast, no external calls).
- Resolve the pool and snapshot reserves.
- Compute the optimal swap split and the slippage floors.
- Re-check reserves, pull the input into engine custody, swap, deposit.
- Hand minted shares and every leftover back to the caller.

Stages: VALIDATED -> PAIR_RESOLVED -> SWAP_COMPUTED -> SWAPPED -> DEPOSITED -> SETTLED.
Any stage short of SETTLED can end in FAILED; a failed run returns whatever
the engine holds for it before the error is re-raised. The engine keeps no
state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..state.assets import NATIVE_COIN, Address, Amount, Asset, normalize_address, parse_asset
from ..state.pools import BPS_DENOM
from .errors import (
    DepositExecutionError,
    InputAmountError,
    InvalidPairError,
    SwapExecutionError,
    ZapError,
)
from .pair_resolver import PairResolver, PoolHint, PoolSnapshot
from .services import DepositService, NativeWrapper, PoolReader, SwapService, TransferService
from .swap_split import SwapSplit, ZapQuote, quote_zap

logger = logging.getLogger(__name__)

DEFAULT_ENGINE_ADDRESS = "0x" + "5a" * 20

TOKEN_AMOUNT_MESSAGE = "amount should be more than 0"
NATIVE_AMOUNT_MESSAGE = "ether should be more than 0"
TOKEN_PAIR_MESSAGE = "Invalid pair or token"
NATIVE_PAIR_MESSAGE = "Invalid pair address"


@dataclass(frozen=True)
class ZapConfig:
    """Runtime config for the engine."""

    engine_address: Address = DEFAULT_ENGINE_ADDRESS
    # Floors applied to the quoted swap output and minted shares.
    slippage_bps: int = 50
    # Allowed reserve drift between the snapshot and the re-read before the swap.
    reserve_tolerance_bps: int = 0
    min_shares: int = 1
    # Wrapped-native token address; None disables native-coin zaps unless the
    # backend's NativeWrapper supplies one.
    wrapped_native: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "engine_address", normalize_address(self.engine_address))
        if self.wrapped_native is not None:
            object.__setattr__(self, "wrapped_native", normalize_address(self.wrapped_native))
        for name, v in (
            ("slippage_bps", self.slippage_bps),
            ("reserve_tolerance_bps", self.reserve_tolerance_bps),
            ("min_shares", self.min_shares),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if not (0 <= self.slippage_bps < BPS_DENOM):
            raise ValueError(f"slippage_bps must be in [0, {BPS_DENOM}): {self.slippage_bps}")
        if not (0 <= self.reserve_tolerance_bps <= BPS_DENOM):
            raise ValueError(f"reserve_tolerance_bps must be in [0, {BPS_DENOM}]: {self.reserve_tolerance_bps}")
        if self.min_shares < 1:
            raise ValueError(f"min_shares must be >= 1: {self.min_shares}")


class ZapStage(Enum):
    VALIDATED = "VALIDATED"
    PAIR_RESOLVED = "PAIR_RESOLVED"
    SWAP_COMPUTED = "SWAP_COMPUTED"
    SWAPPED = "SWAPPED"
    DEPOSITED = "DEPOSITED"
    SETTLED = "SETTLED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ZapRequest:
    pool: PoolHint
    input_asset: Asset
    input_amount: Amount
    caller: Address

    @property
    def native(self) -> bool:
        return self.input_asset.is_native


@dataclass(frozen=True)
class ZapResult:
    pool: Address
    input_asset: Asset
    other_asset: Asset
    shares_minted: Amount
    leftover_input: Amount
    leftover_other: Amount
    swap_amount: Amount
    amount_out: Amount
    stages: Tuple[ZapStage, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool": self.pool,
            "input_asset": self.input_asset.to_str(),
            "other_asset": self.other_asset.to_str(),
            "shares_minted": self.shares_minted,
            "leftover_input": self.leftover_input,
            "leftover_other": self.leftover_other,
            "swap_amount": self.swap_amount,
            "amount_out": self.amount_out,
            "stages": [s.value for s in self.stages],
        }


@dataclass
class _ZapRun:
    """Mutable bookkeeping for one request: stages reached and assets held."""

    request: ZapRequest
    stages: List[ZapStage] = field(default_factory=list)
    custody: Dict[Asset, Amount] = field(default_factory=dict)

    def advance(self, stage: ZapStage) -> None:
        self.stages.append(stage)
        logger.debug("zap for %s -> %s", self.request.caller, stage.value)

    def hold(self, asset: Asset, amount: Amount) -> None:
        if amount > 0:
            self.custody[asset] = self.custody.get(asset, 0) + amount

    def release(self, asset: Asset, amount: Amount) -> None:
        held = self.custody.get(asset, 0)
        if amount > held:
            raise AssertionError(f"releasing {amount} of {asset} but only {held} held")
        if amount == held:
            self.custody.pop(asset, None)
        else:
            self.custody[asset] = held - amount

    def held(self) -> List[Tuple[Asset, Amount]]:
        return sorted(
            ((a, amt) for a, amt in self.custody.items() if amt > 0),
            key=lambda item: item[0].sort_key(),
        )


class ZapEngine:
    """
    Stateless zap orchestrator over external pool, swap, deposit and transfer services.
    """

    def __init__(
        self,
        *,
        reader: PoolReader,
        swapper: SwapService,
        depositor: DepositService,
        transfers: TransferService,
        wrapper: Optional[NativeWrapper] = None,
        config: ZapConfig = ZapConfig(),
    ) -> None:
        wrapped: Optional[Asset] = wrapper.wrapped_native if wrapper is not None else None
        if config.wrapped_native is not None:
            configured = Asset.token(config.wrapped_native)
            if wrapped is not None and wrapped != configured:
                raise ValueError(
                    f"wrapped_native {configured} does not match the wrapper's {wrapped}"
                )
            wrapped = configured
        self._resolver = PairResolver(reader, wrapped_native=wrapped)
        self._swapper = swapper
        self._depositor = depositor
        self._transfers = transfers
        self._wrapper = wrapper
        self._config = config

    @classmethod
    def from_backend(cls, backend: Any, config: ZapConfig = ZapConfig()) -> "ZapEngine":
        """Build an engine over one object implementing every service interface."""
        return cls(
            reader=backend,
            swapper=backend,
            depositor=backend,
            transfers=backend,
            wrapper=backend,
            config=config,
        )

    @property
    def address(self) -> Address:
        return self._config.engine_address

    @property
    def config(self) -> ZapConfig:
        return self._config

    @property
    def resolver(self) -> PairResolver:
        return self._resolver

    # ---------- Public surface ----------

    def zap_in_token(
        self,
        pool_hint: PoolHint,
        input_asset: Union[Asset, str],
        input_amount: Amount,
        caller: Address,
    ) -> ZapResult:
        """Zap an ERC20-style token into the pool identified by `pool_hint`."""
        self._require_amount(input_amount, native=False)
        asset = self._parse_input(input_asset)
        if asset.is_native:
            raise InvalidPairError(f"{TOKEN_PAIR_MESSAGE}: use zap_in_native for the native coin")
        return self.zap_in(ZapRequest(pool=pool_hint, input_asset=asset, input_amount=input_amount, caller=caller))

    def zap_in_native(self, pool_hint: PoolHint, value: Amount, caller: Address) -> ZapResult:
        """Zap the native coin attached to the call (`value`)."""
        self._require_amount(value, native=True)
        return self.zap_in(ZapRequest(pool=pool_hint, input_asset=NATIVE_COIN, input_amount=value, caller=caller))

    def zap_in(self, request: ZapRequest) -> ZapResult:
        run = _ZapRun(request=request)
        try:
            return self._execute(run)
        except ZapError as exc:
            run.advance(ZapStage.FAILED)
            if run.custody:
                refunded = self._refund(run)
                logger.warning("zap for %s failed (%s); refunded %s", request.caller, exc, refunded)
            else:
                logger.info("zap for %s rejected: %s", request.caller, exc)
            raise

    def quote(self, pool_hint: PoolHint, input_asset: Union[Asset, str], input_amount: Amount) -> ZapQuote:
        """Preview a zap against current reserves without moving any assets."""
        asset = self._parse_input(input_asset)
        self._require_amount(input_amount, native=asset.is_native)
        snapshot = self._resolve(pool_hint, asset)
        return quote_zap(
            snapshot,
            self._resolver.to_pool_asset(asset),
            input_amount,
            slippage_bps=self._config.slippage_bps,
        )

    # ---------- Steps ----------

    def _require_amount(self, amount: Amount, *, native: bool) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise InputAmountError(NATIVE_AMOUNT_MESSAGE if native else TOKEN_AMOUNT_MESSAGE)

    def _parse_input(self, input_asset: Union[Asset, str]) -> Asset:
        try:
            return parse_asset(input_asset)
        except (TypeError, ValueError) as exc:
            raise InvalidPairError(f"{TOKEN_PAIR_MESSAGE}: {exc}") from exc

    def _resolve(self, hint: PoolHint, asset: Asset) -> PoolSnapshot:
        label = NATIVE_PAIR_MESSAGE if asset.is_native else TOKEN_PAIR_MESSAGE
        try:
            return self._resolver.resolve(hint, asset)
        except InvalidPairError as exc:
            raise InvalidPairError(f"{label}: {exc}") from exc

    def _execute(self, run: _ZapRun) -> ZapResult:
        req = run.request
        self._require_amount(req.input_amount, native=req.native)
        run.advance(ZapStage.VALIDATED)

        snapshot = self._resolve(req.pool, req.input_asset)
        run.advance(ZapStage.PAIR_RESOLVED)

        asset_in = self._resolver.to_pool_asset(req.input_asset)
        zap_quote = quote_zap(snapshot, asset_in, req.input_amount, slippage_bps=self._config.slippage_bps)
        split = zap_quote.split
        min_shares = max(self._config.min_shares, zap_quote.min_shares)
        run.advance(ZapStage.SWAP_COMPUTED)

        self._resolver.ensure_fresh(snapshot, tolerance_bps=self._config.reserve_tolerance_bps)
        self._pull_input(run, asset_in)
        amount_out = self._swap(run, snapshot, split)
        run.advance(ZapStage.SWAPPED)

        shares, unused_in, unused_out = self._deposit(run, snapshot, split, amount_out, min_shares)
        run.advance(ZapStage.DEPOSITED)

        self._settle(run)
        run.advance(ZapStage.SETTLED)

        logger.info(
            "zap settled: caller=%s pool=%s in=%d %s swapped=%d out=%d shares=%d leftovers=(%d, %d)",
            req.caller,
            snapshot.address,
            req.input_amount,
            req.input_asset,
            split.swap_amount,
            amount_out,
            shares,
            unused_in,
            unused_out,
        )
        return ZapResult(
            pool=snapshot.address,
            input_asset=req.input_asset,
            other_asset=split.asset_out,
            shares_minted=shares,
            leftover_input=unused_in,
            leftover_other=unused_out,
            swap_amount=split.swap_amount,
            amount_out=amount_out,
            stages=tuple(run.stages),
        )

    def _pull_input(self, run: _ZapRun, asset_in: Asset) -> None:
        req = run.request
        engine = self.address
        try:
            self._transfers.transfer(req.input_asset, req.caller, engine, req.input_amount)
        except Exception as exc:
            raise SwapExecutionError(f"could not take {req.input_amount} {req.input_asset} from caller: {exc}") from exc
        run.hold(req.input_asset, req.input_amount)

        if req.native:
            if self._wrapper is None:
                raise SwapExecutionError("no native wrapper configured")
            try:
                self._wrapper.wrap_native(engine, req.input_amount)
            except Exception as exc:
                raise SwapExecutionError(f"wrapping native coin failed: {exc}") from exc
            run.release(NATIVE_COIN, req.input_amount)
            run.hold(asset_in, req.input_amount)

    def _swap(self, run: _ZapRun, snapshot: PoolSnapshot, split: SwapSplit) -> Amount:
        try:
            amount_out = self._swapper.swap(
                snapshot.address,
                split.asset_in,
                split.swap_amount,
                split.min_amount_out,
                self.address,
            )
        except Exception as exc:
            raise SwapExecutionError(f"swap reverted: {exc}") from exc

        run.release(split.asset_in, split.swap_amount)
        run.hold(split.asset_out, amount_out)
        if amount_out < split.min_amount_out:
            raise SwapExecutionError(
                f"swap returned {amount_out} {split.asset_out}, below minimum {split.min_amount_out}"
            )
        return amount_out

    def _deposit(
        self,
        run: _ZapRun,
        snapshot: PoolSnapshot,
        split: SwapSplit,
        amount_out: Amount,
        min_shares: Amount,
    ) -> Tuple[Amount, Amount, Amount]:
        """Returns (shares, unused_in, unused_out)."""
        in_is_0 = split.asset_in == snapshot.asset0
        offered_in = split.deposit_in
        amount0, amount1 = (offered_in, amount_out) if in_is_0 else (amount_out, offered_in)

        try:
            shares, unused0, unused1 = self._depositor.add_liquidity(
                snapshot.address, amount0, amount1, min_shares, self.address
            )
        except Exception as exc:
            refunded = self._refund(run)
            logger.warning("deposit into %s failed after swap; refunded %s", snapshot.address, refunded)
            raise DepositExecutionError(f"deposit failed after swap: {exc}", refunded=refunded) from exc

        run.hold(snapshot.share_asset, shares)
        unused_in, unused_out = (unused0, unused1) if in_is_0 else (unused1, unused0)
        if not (0 <= unused_in <= offered_in and 0 <= unused_out <= amount_out):
            raise DepositExecutionError(
                f"deposit reported unused amounts ({unused0}, {unused1}) outside offered ({amount0}, {amount1})"
            )
        run.release(split.asset_in, offered_in - unused_in)
        run.release(split.asset_out, amount_out - unused_out)
        if shares < min_shares:
            raise DepositExecutionError(f"deposit minted {shares} shares, below minimum {min_shares}")
        return shares, unused_in, unused_out

    def _settle(self, run: _ZapRun) -> None:
        self._return_holdings(run)

    def _refund(self, run: _ZapRun) -> Dict[str, Amount]:
        return self._return_holdings(run)

    def _return_holdings(self, run: _ZapRun) -> Dict[str, Amount]:
        """Send everything held for this run back to the caller."""
        req = run.request
        wrapped = self._resolver.wrapped_native
        returned: Dict[str, Amount] = {}
        for asset, amount in run.held():
            out_asset = asset
            if req.native and wrapped is not None and asset == wrapped and self._wrapper is not None:
                self._wrapper.unwrap_native(self.address, amount)
                out_asset = NATIVE_COIN
            self._transfers.transfer(out_asset, self.address, req.caller, amount)
            run.release(asset, amount)
            key = out_asset.to_str()
            returned[key] = returned.get(key, 0) + amount
        return returned
