from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from deps.store import get_round_book
from services.rounds import RoundBook

router = APIRouter(prefix="/api/rounds", tags=["rounds"])


class CommitIn(BaseModel):
    nonce: Optional[int] = Field(default=None, ge=0)


class StartIn(BaseModel):
    client_seed: str
    rows: int = 12
    risk: Literal["low", "medium", "high"] = "medium"
    drop_column: Optional[int] = None
    bet_amount: Decimal = Field(gt=0, max_digits=38, decimal_places=8)


@router.post("/commit")
def commit_round(data: Optional[CommitIn] = None, book: RoundBook = Depends(get_round_book)):
    rnd = book.commit(nonce=data.nonce if data else None)
    return {
        "round_id": rnd.round_id,
        "server_seed_hash": rnd.server_seed_hash,
        "nonce": rnd.nonce,
        "state": rnd.state.value,
    }


@router.post("/{round_id}/start")
def start_round(round_id: str, s: StartIn, book: RoundBook = Depends(get_round_book)):
    rnd = book.start(
        round_id,
        client_seed=s.client_seed,
        rows=s.rows,
        risk=s.risk,
        drop_column=s.drop_column,
        bet_amount=s.bet_amount,
    )
    return {
        "round_id": rnd.round_id,
        "path": list(rnd.outcome.path),
        "bucket": rnd.outcome.bucket,
        "multiplier": rnd.multiplier,
        "payout": str(rnd.payout),
        "rows": rnd.rows,
        "risk": rnd.risk,
        "drop_column": rnd.drop_column,
        "algorithm": rnd.algorithm,
        "state": rnd.state.value,
    }


@router.post("/{round_id}/reveal")
def reveal_round(round_id: str, book: RoundBook = Depends(get_round_book)):
    rnd = book.reveal(round_id)
    return {
        "round_id": rnd.round_id,
        "server_seed": rnd.server_seed.hex(),
        "server_seed_hash": rnd.server_seed_hash,
        "nonce": rnd.nonce,
        "state": rnd.state.value,
    }


@router.get("/{round_id}")
def round_status(round_id: str, book: RoundBook = Depends(get_round_book)):
    return book.get(round_id).public_view()
