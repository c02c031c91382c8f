"""Human-shareable credential generation.

Credentials look like ``purple-tiger-jump-083921``: one adjective, one noun
and one verb drawn independently, plus a six digit zero-padded suffix. With
the lists below the search space is 56 * 56 * 48 * 10**6 (about 1.5e11, or
roughly 37 bits). That is enough to resist online guessing against a single
gateway but it is NOT a long-term secret for high-value systems.
"""

from __future__ import annotations

import math
import secrets

ADJECTIVES: tuple[str, ...] = (
    "happy", "purple", "brave", "calm", "swift", "bright", "silent", "wise",
    "ancient", "modern", "fast", "slow", "green", "blue", "red", "yellow",
    "quiet", "loud", "soft", "hard", "smooth", "rough", "cold", "hot",
    "wild", "tame", "proud", "humble", "rich", "poor", "strong", "weak",
    "clever", "foolish", "kind", "cruel", "sweet", "sour", "fresh", "stale",
    "golden", "silver", "bronze", "iron", "steel", "wooden", "stone", "glass",
    "sunny", "rainy", "windy", "snowy", "stormy", "cloudy", "misty", "foggy",
)

NOUNS: tuple[str, ...] = (
    "tiger", "eagle", "ocean", "mountain", "forest", "river", "star", "moon",
    "lion", "wolf", "bear", "hawk", "shark", "whale", "dolphin", "seal",
    "tree", "flower", "grass", "leaf", "root", "branch", "seed", "fruit",
    "stone", "rock", "sand", "dust", "clay", "mud", "dirt", "soil",
    "fire", "water", "air", "earth", "metal", "wood", "ice", "steam",
    "king", "queen", "prince", "knight", "wizard", "witch", "giant", "elf",
    "city", "town", "village", "castle", "tower", "bridge", "road", "path",
)

VERBS: tuple[str, ...] = (
    "jump", "fly", "run", "swim", "glow", "sing", "dance", "dream",
    "walk", "crawl", "climb", "dive", "float", "sink", "rise", "fall",
    "eat", "drink", "sleep", "wake", "talk", "shout", "whisper", "listen",
    "look", "watch", "see", "hear", "touch", "feel", "smell", "taste",
    "build", "break", "fix", "make", "create", "destroy", "save", "help",
    "learn", "teach", "read", "write", "draw", "paint", "play", "work",
)

SUFFIX_DIGITS = 6
SEPARATOR = "-"


def generate_passphrase() -> str:
    """Return a fresh credential drawn from the system CSPRNG."""
    suffix = secrets.randbelow(10**SUFFIX_DIGITS)
    return SEPARATOR.join(
        (
            secrets.choice(ADJECTIVES),
            secrets.choice(NOUNS),
            secrets.choice(VERBS),
            f"{suffix:0{SUFFIX_DIGITS}d}",
        )
    )


def search_space() -> int:
    return len(ADJECTIVES) * len(NOUNS) * len(VERBS) * 10**SUFFIX_DIGITS


def entropy_bits() -> float:
    return math.log2(search_space())


__all__ = [
    "ADJECTIVES",
    "NOUNS",
    "SEPARATOR",
    "SUFFIX_DIGITS",
    "VERBS",
    "entropy_bits",
    "generate_passphrase",
    "search_space",
]
