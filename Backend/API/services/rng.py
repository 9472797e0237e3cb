"""Deterministic Plinko outcomes from (server seed, client seed, nonce).

Every draw comes from HMAC-SHA256 keyed with the server seed over
``"{client_seed}:{nonce}:{cursor}"``. Each 32-byte digest yields eight
big-endian 32-bit words, each scaled to a float in [0, 1). Row ``i`` goes
right when its float is >= 0.5. Changing any of this breaks verification of
past rounds, so it is pinned to ``ALGORITHM``.
"""
import hmac, hashlib
from dataclasses import dataclass
from itertools import islice
from typing import Iterator, Optional

from services.commitment import check_server_seed
from services.errors import InvalidParameter

ALGORITHM = "hmac-sha256-v1"

MIN_ROWS = 8
MAX_ROWS = 20
MAX_CLIENT_SEED_LEN = 256
RISKS = ("low", "medium", "high")
DEFAULT_RISK = "medium"

LEFT, RIGHT = "L", "R"
_WORD = 4
_SCALE = float(1 << 32)


@dataclass(frozen=True)
class Outcome:
    rows: int
    path: tuple
    rng_values: tuple

    @property
    def bucket(self) -> int:
        return self.path.count(RIGHT)


def check_rows(rows: int) -> int:
    if isinstance(rows, bool) or not isinstance(rows, int):
        raise InvalidParameter("rows must be an integer")
    if not MIN_ROWS <= rows <= MAX_ROWS:
        raise InvalidParameter(f"rows must be between {MIN_ROWS} and {MAX_ROWS}")
    return rows


def check_risk(risk: Optional[str]) -> str:
    if risk is None:
        return DEFAULT_RISK
    if risk not in RISKS:
        raise InvalidParameter(f"risk must be one of {', '.join(RISKS)}")
    return risk


def check_params(client_seed: str, nonce: int, rows: int,
                 risk: Optional[str] = None, drop_column: Optional[int] = None) -> str:
    """Validate everything but the server seed; returns the resolved risk tier."""
    if not isinstance(client_seed, str) or not client_seed:
        raise InvalidParameter("client seed must be a non-empty string")
    if len(client_seed) > MAX_CLIENT_SEED_LEN:
        raise InvalidParameter(f"client seed longer than {MAX_CLIENT_SEED_LEN} characters")
    if isinstance(nonce, bool) or not isinstance(nonce, int) or nonce < 0:
        raise InvalidParameter("nonce must be a non-negative integer")
    check_rows(rows)
    if drop_column is not None:
        if isinstance(drop_column, bool) or not isinstance(drop_column, int):
            raise InvalidParameter("drop_column must be an integer")
        if not 0 <= drop_column <= rows:
            raise InvalidParameter(f"drop_column must be between 0 and {rows}")
    return check_risk(risk)


def float_stream(server_seed: bytes, client_seed: str, nonce: int) -> Iterator[float]:
    cursor = 0
    while True:
        msg = f"{client_seed}:{nonce}:{cursor}".encode("utf-8")
        digest = hmac.new(server_seed, msg, hashlib.sha256).digest()
        for i in range(0, len(digest), _WORD):
            yield int.from_bytes(digest[i:i + _WORD], "big") / _SCALE
        cursor += 1


def generate(server_seed: bytes, client_seed: str, nonce: int, rows: int,
             risk: Optional[str] = None, drop_column: Optional[int] = None) -> Outcome:
    """Compute the ball path for one round.

    ``risk`` and ``drop_column`` are validated here but do not feed the
    draws: the risk tier only selects the paytable, and the drop column is
    where the ball is shown entering the board.
    """
    server_seed = check_server_seed(server_seed)
    check_params(client_seed, nonce, rows, risk, drop_column)
    values = tuple(islice(float_stream(server_seed, client_seed, nonce), rows))
    path = tuple(RIGHT if v >= 0.5 else LEFT for v in values)
    return Outcome(rows=rows, path=path, rng_values=values)
