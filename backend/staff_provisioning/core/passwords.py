"""Password Policy — choose the credential for direct account creation.

Invariants:
    - Supplied password used (trimmed) only if its trimmed length >= MIN_SUPPLIED_LENGTH
    - Generated passwords are GENERATED_LENGTH chars with >= 1 char from every class
    - Visually ambiguous characters (I, O, l, o, 0, 1) never generated
    - All randomness from `secrets` — the result is a live account credential

Design Decisions:
    - Seed one char per class, fill from the union, then shuffle: guarantees
      coverage without rejection sampling
    - No IO: the only side effect is consuming OS entropy
"""

import secrets

MIN_SUPPLIED_LENGTH = 8
GENERATED_LENGTH = 14

UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWERCASE = "abcdefghijkmnpqrstuvwxyz"
DIGITS = "23456789"
SYMBOLS = "!@#$%^&*?-_=+"

CHARACTER_CLASSES = (UPPERCASE, LOWERCASE, DIGITS, SYMBOLS)
ALL_CHARACTERS = "".join(CHARACTER_CLASSES)

_random = secrets.SystemRandom()


def generate_password(length: int = GENERATED_LENGTH) -> str:
    """Random password containing every character class at least once."""
    if length < len(CHARACTER_CLASSES):
        raise ValueError(
            f"length must be at least {len(CHARACTER_CLASSES)}, got {length}",
        )
    chars = [secrets.choice(charset) for charset in CHARACTER_CLASSES]
    chars += [
        secrets.choice(ALL_CHARACTERS)
        for _ in range(length - len(CHARACTER_CLASSES))
    ]
    _random.shuffle(chars)
    return "".join(chars)


def choose_password(supplied: str | None) -> str:
    """Trimmed supplied password if long enough, else a generated one."""
    if supplied is not None:
        trimmed = supplied.strip()
        if len(trimmed) >= MIN_SUPPLIED_LENGTH:
            return trimmed
    return generate_password()
