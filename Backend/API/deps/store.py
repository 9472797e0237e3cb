from deps.config import MAX_ROUNDS, SERVER_SEED_BYTES
from services.rounds import RoundBook

_book = RoundBook(seed_bytes=SERVER_SEED_BYTES, max_rounds=MAX_ROUNDS)


def get_round_book() -> RoundBook:
    return _book
