from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from services.commitment import parse_server_seed, server_seed_hash
from services.paytable import multiplier_for, payout_for
from services.rng import ALGORITHM, Outcome, check_params, generate


@dataclass(frozen=True)
class Verification:
    server_seed_hash: str
    outcome: Outcome
    risk: str
    multiplier: float
    drop_column: Optional[int] = None
    payout: Optional[Decimal] = None
    hash_matches: Optional[bool] = None
    algorithm: str = ALGORITHM

    @property
    def bucket(self) -> int:
        return self.outcome.bucket


def verify(server_seed: str, client_seed: str, nonce: int, rows: int,
           risk: Optional[str] = None, drop_column: Optional[int] = None,
           bet_amount=None, expected_hash: Optional[str] = None) -> Verification:
    """Recompute a revealed round from its disclosed inputs.

    Uses the exact functions a live round uses, so the result matches what
    the round produced at start time. ``expected_hash`` is the hash published
    at commit; when given, ``hash_matches`` tells whether the revealed seed
    is the one that was committed to.
    """
    seed = parse_server_seed(server_seed)
    risk = check_params(client_seed, nonce, rows, risk, drop_column)
    digest = server_seed_hash(seed)
    outcome = generate(seed, client_seed, nonce, rows, risk, drop_column)
    multiplier = multiplier_for(rows, risk, outcome.bucket)
    payout = payout_for(bet_amount, multiplier) if bet_amount is not None else None
    matches = None
    if expected_hash is not None:
        matches = digest == expected_hash.strip().lower()
    return Verification(
        server_seed_hash=digest,
        outcome=outcome,
        risk=risk,
        multiplier=multiplier,
        drop_column=drop_column,
        payout=payout,
        hash_matches=matches,
    )
