# ring_escape/utils/random.py

from __future__ import annotations

from typing import Hashable
import numpy as np


def make_rng(seed: int | None = None, name: str = "physics") -> np.random.Generator:
    """
    Build an independent RNG stream for (seed, name).

    The core never touches a global generator: hosts create one of these and
    pass it to `step`, so identical seeds replay identical runs.

    - If seed is None: the stream is entropy-seeded (non-reproducible).
    """
    if seed is None:
        return np.random.default_rng()
    # SeedSequence makes it easy to derive independent streams.
    ss = np.random.SeedSequence([seed, _stable_int(name)])
    return np.random.default_rng(ss)


def random_unit_vector(rng: np.random.Generator) -> np.ndarray:
    angle = rng.uniform(0.0, 2 * np.pi)
    return np.array([np.cos(angle), np.sin(angle)])


def _stable_int(x: Hashable) -> int:
    """
    Convert arbitrary key -> stable 32-bit-ish integer without relying on Python's hash().
    """
    s = repr(x).encode("utf-8", errors="surrogatepass")
    # Simple stable folding into 32 bits
    h = 2166136261
    for b in s:
        h ^= b
        h = (h * 16777619) & 0xFFFFFFFF
    return h
