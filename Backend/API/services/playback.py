import asyncio
from typing import AsyncIterator, List

from services.rng import RIGHT


def trace(path) -> List[dict]:
    """One frame per peg row for an already computed path."""
    frames = []
    position = 0
    for step, direction in enumerate(path):
        if direction == RIGHT:
            position += 1
        frames.append({"step": step, "row": step + 1, "direction": direction, "position": position})
    return frames


async def frames(path, interval: float = 0.18) -> AsyncIterator[dict]:
    # Cancelling the consumer stops playback; nothing is recomputed.
    for frame in trace(path):
        await asyncio.sleep(interval)
        yield frame
