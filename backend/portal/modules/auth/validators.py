"""
Format validators for student registration.

Institutional emails look like ``rajdeepn.ug20.cse@nitp.ac.in``. Roll numbers
are 7 digits whose first two digits are the admission year; only the three
cohorts admitted 4, 3 and 2 years before the current year may self-register
(in 2023 that is 19xxxxx, 20xxxxx and 21xxxxx).
"""
import re
from datetime import datetime
from typing import Optional, Tuple

# Four '$' characters with anything in between, e.g. $2b$10$salt$hash
_HASHED_SECRET_RE = re.compile(r"\$.*?\$.*?\$.*?\$")

_ROLL_NUMBER_RE = re.compile(r"[0-9]{7}")

# Offsets (in years) of the oldest and newest cohort allowed to register
ROLL_WINDOW_START_OFFSET = 4
ROLL_WINDOW_SIZE = 3


def _institute_email_re(domain: str) -> "re.Pattern[str]":
    return re.compile(rf"[a-zA-Z0-9._]+@{re.escape(domain)}")


def is_institute_email(email, domain: str = "nitp.ac.in") -> bool:
    """True when ``email`` is ``<letters, digits, '.', '_'>@<domain>``.

    The domain must match exactly (case-sensitive). Callers lower-case the
    address only after it passed this check.
    """
    if not isinstance(email, str):
        return False
    return _institute_email_re(domain).fullmatch(email) is not None


def allowed_roll_year_codes(now: Optional[datetime] = None) -> Tuple[str, ...]:
    """Two-digit admission year codes allowed to register at ``now``"""
    now = now or datetime.now()
    start = now.year - 2000 - ROLL_WINDOW_START_OFFSET
    return tuple(f"{start + i:02d}" for i in range(ROLL_WINDOW_SIZE))


def is_valid_roll_number(roll, now: Optional[datetime] = None) -> bool:
    """True for a 7-digit roll number inside the rolling admission window.

    The window is computed from ``now`` on every call.
    """
    if not isinstance(roll, str) or not _ROLL_NUMBER_RE.fullmatch(roll):
        return False
    return roll[:2] in allowed_roll_year_codes(now)


def looks_already_hashed(secret) -> bool:
    """Heuristic: does a plaintext password look like an encoded hash?

    bcrypt / crypt(3) style hashes are ``$id$params$salt$hash``. A password of
    that shape cannot be told apart from a stored hash by import and admin
    tooling, so it is rejected. Best effort only.
    """
    if not isinstance(secret, str):
        return False
    return _HASHED_SECRET_RE.search(secret) is not None
