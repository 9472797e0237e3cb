"""Commit/reveal round lifecycle.

idle -> committed -> started -> revealed, never skipping or going back.
The server seed stays inside the ``Round`` until ``reveal``.
"""
import itertools
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from services.commitment import new_server_seed, server_seed_hash
from services.errors import InvalidParameter, InvalidRoundState, NotFound
from services.paytable import check_bet_amount, multiplier_for, payout_for
from services.rng import ALGORITHM, Outcome, check_params, generate

logger = logging.getLogger(__name__)


class RoundState(str, Enum):
    IDLE = "idle"
    COMMITTED = "committed"
    STARTED = "started"
    REVEALED = "revealed"


def _now():
    return datetime.now(timezone.utc)


@dataclass
class Round:
    round_id: str
    server_seed: bytes = field(repr=False)
    server_seed_hash: str
    nonce: int
    state: RoundState = RoundState.IDLE
    created_at: datetime = field(default_factory=_now)
    client_seed: Optional[str] = None
    rows: Optional[int] = None
    risk: Optional[str] = None
    drop_column: Optional[int] = None
    bet_amount: Optional[Decimal] = None
    outcome: Optional[Outcome] = None
    multiplier: Optional[float] = None
    payout: Optional[Decimal] = None
    started_at: Optional[datetime] = None
    revealed_at: Optional[datetime] = None
    algorithm: str = ALGORITHM
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def same_start(self, client_seed, rows, risk, drop_column, bet_amount) -> bool:
        return (self.client_seed, self.rows, self.risk, self.drop_column, self.bet_amount) == \
            (client_seed, rows, risk, drop_column, bet_amount)

    def public_view(self) -> dict:
        """Round status safe to hand out: the seed appears only once revealed."""
        view = {
            "round_id": self.round_id,
            "state": self.state.value,
            "server_seed_hash": self.server_seed_hash,
            "nonce": self.nonce,
            "created_at": self.created_at,
        }
        if self.outcome is not None:
            view.update(
                client_seed=self.client_seed,
                rows=self.rows,
                risk=self.risk,
                drop_column=self.drop_column,
                bet_amount=str(self.bet_amount),
                path=list(self.outcome.path),
                bucket=self.outcome.bucket,
                multiplier=self.multiplier,
                payout=str(self.payout),
                algorithm=self.algorithm,
                started_at=self.started_at,
            )
        if self.state is RoundState.REVEALED:
            view.update(server_seed=self.server_seed.hex(), revealed_at=self.revealed_at)
        return view


class RoundBook:
    """In-process store of rounds; one lock per round serialises its transitions.

    Once the store holds ``max_rounds`` rounds, committing a new one drops the
    oldest revealed rounds first. Rounds that are still committed or started
    are never dropped, so the store can exceed the cap only with open rounds.
    """

    def __init__(self, seed_bytes: int = 32, max_rounds: int = 100_000):
        self.seed_bytes = seed_bytes
        self.max_rounds = max_rounds
        self._rounds: Dict[str, Round] = {}
        self._lock = threading.Lock()
        self._nonces = itertools.count()

    def __len__(self):
        return len(self._rounds)

    def _evict_revealed(self):
        # caller holds self._lock; dict order is commit order
        excess = len(self._rounds) - self.max_rounds + 1
        if excess <= 0:
            return
        stale = [rid for rid, r in self._rounds.items() if r.state is RoundState.REVEALED][:excess]
        for rid in stale:
            del self._rounds[rid]
        if stale:
            logger.debug("evicted %d revealed rounds", len(stale))

    def commit(self, nonce: Optional[int] = None) -> Round:
        if nonce is not None and (isinstance(nonce, bool) or not isinstance(nonce, int) or nonce < 0):
            raise InvalidParameter("nonce must be a non-negative integer")
        seed = new_server_seed(self.seed_bytes)
        with self._lock:
            if nonce is None:
                nonce = next(self._nonces)
            rnd = Round(
                round_id=uuid.uuid4().hex,
                server_seed=seed,
                server_seed_hash=server_seed_hash(seed),
                nonce=nonce,
            )
            rnd.state = RoundState.COMMITTED
            self._evict_revealed()
            self._rounds[rnd.round_id] = rnd
        logger.info("round %s committed (nonce=%s)", rnd.round_id, rnd.nonce)
        return rnd

    def get(self, round_id: str) -> Round:
        with self._lock:
            rnd = self._rounds.get(round_id)
        if rnd is None:
            raise NotFound(f"round {round_id} not found")
        return rnd

    def start(self, round_id: str, client_seed: str, rows: int,
              risk: Optional[str] = None, drop_column: Optional[int] = None,
              bet_amount=None) -> Round:
        risk = check_params(client_seed, 0, rows, risk, drop_column)
        if bet_amount is None:
            raise InvalidParameter("bet amount is required")
        bet_amount = check_bet_amount(bet_amount)
        rnd = self.get(round_id)
        with rnd.lock:
            if rnd.state is RoundState.STARTED:
                if rnd.same_start(client_seed, rows, risk, drop_column, bet_amount):
                    logger.debug("round %s start retried, returning stored outcome", round_id)
                    return rnd
                raise InvalidRoundState(f"round {round_id} already started with different parameters")
            if rnd.state is not RoundState.COMMITTED:
                raise InvalidRoundState(f"round {round_id} is {rnd.state.value}, expected committed")

            outcome = generate(rnd.server_seed, client_seed, rnd.nonce, rows, risk, drop_column)
            multiplier = multiplier_for(rows, risk, outcome.bucket)
            payout = payout_for(bet_amount, multiplier)

            rnd.client_seed = client_seed
            rnd.rows = rows
            rnd.risk = risk
            rnd.drop_column = drop_column
            rnd.bet_amount = bet_amount
            rnd.outcome = outcome
            rnd.multiplier = multiplier
            rnd.payout = payout
            rnd.started_at = _now()
            rnd.state = RoundState.STARTED
        logger.info("round %s started: rows=%s risk=%s bucket=%s", round_id, rows, risk, outcome.bucket)
        return rnd

    def reveal(self, round_id: str) -> Round:
        rnd = self.get(round_id)
        with rnd.lock:
            if rnd.state is not RoundState.STARTED:
                raise InvalidRoundState(f"round {round_id} is {rnd.state.value}, expected started")
            rnd.revealed_at = _now()
            rnd.state = RoundState.REVEALED
        logger.info("round %s revealed", round_id)
        return rnd
