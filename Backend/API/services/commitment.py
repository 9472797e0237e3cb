import hashlib, secrets
from services.errors import InvalidParameter

MIN_SEED_BYTES = 1
MAX_SEED_BYTES = 256


def new_server_seed(size: int = 32) -> bytes:
    if not 16 <= size <= MAX_SEED_BYTES:
        raise InvalidParameter(f"server seed size must be between 16 and {MAX_SEED_BYTES} bytes")
    return secrets.token_bytes(size)


def server_seed_hash(server_seed: bytes) -> str:
    """SHA-256 of the raw seed bytes, published at commit time."""
    check_server_seed(server_seed)
    return hashlib.sha256(server_seed).hexdigest()


def check_server_seed(server_seed: bytes) -> bytes:
    if not isinstance(server_seed, (bytes, bytearray)):
        raise InvalidParameter("server seed must be bytes")
    if not MIN_SEED_BYTES <= len(server_seed) <= MAX_SEED_BYTES:
        raise InvalidParameter(f"server seed must be 1..{MAX_SEED_BYTES} bytes")
    return bytes(server_seed)


def parse_server_seed(value: str) -> bytes:
    """Decode a revealed seed as pasted by a player (hex, optional 0x prefix)."""
    text = (value or "").strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    try:
        raw = bytes.fromhex(text)
    except ValueError:
        raise InvalidParameter("server seed must be a hex string") from None
    return check_server_seed(raw)
