import os
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SERVER_SEED_BYTES = int(os.getenv("SERVER_SEED_BYTES", "32"))
PLAYBACK_STEP_MS = int(os.getenv("PLAYBACK_STEP_MS", "180"))
MAX_ROUNDS = int(os.getenv("MAX_ROUNDS", "100000"))
