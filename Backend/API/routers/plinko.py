from typing import Optional

from fastapi import APIRouter

from services.paytable import build_table, bucket_probabilities
from services.rng import check_risk
from services.verifier import verify

router = APIRouter(prefix="/api", tags=["plinko"])


@router.get("/verify")
def verify_outcome(server_seed: str, client_seed: str, nonce: int = 0, rows: int = 16,
                   risk: str = "medium", drop_column: Optional[int] = None,
                   bet_amount: Optional[str] = None, server_seed_hash: Optional[str] = None):
    # the verify page sends an empty bet_amount when no bet is entered
    bet = bet_amount if bet_amount not in (None, "") else None
    v = verify(server_seed, client_seed, nonce, rows, risk=risk, drop_column=drop_column,
               bet_amount=bet, expected_hash=server_seed_hash or None)
    return {
        "server_seed_hash": v.server_seed_hash,
        "hash_matches": v.hash_matches,
        "path": list(v.outcome.path),
        "bucket": v.bucket,
        "multiplier": v.multiplier,
        "payout": str(v.payout) if v.payout is not None else None,
        "rng_values": list(v.outcome.rng_values),
        "rows": rows,
        "risk": v.risk,
        "drop_column": v.drop_column,
        "algorithm": v.algorithm,
    }


@router.get("/multipliers")
def multiplier_table(rows: int = 12, risk: str = "medium"):
    table = build_table(rows, risk)
    return {
        "rows": rows,
        "risk": check_risk(risk),
        "multipliers": list(table),
        "probabilities": list(bucket_probabilities(rows)),
    }
