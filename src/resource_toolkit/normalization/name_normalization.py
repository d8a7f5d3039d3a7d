"""
name_normalization.py
Author name / email normalization used by consultant matching.

Goals:
- Strip bracketed and parenthetical asides ("Jane Doe (retired)")
- Drop professional credentials and generational suffixes ("MD", "PhD", "Jr.")
- Reorder "Last, First" into "first last"
- Lowercase and collapse whitespace

A name made only of credentials normalizes to "" and is treated downstream
as "no usable name".
"""

from __future__ import annotations

import re
from typing import List, Optional

CREDENTIALS = (
    "PhD", "PharmD", "PsyD", "EdD", "DrPH", "ScD", "DMin", "DBA", "JD", "DDS", "DMD", "DO", "DPM", "DC",
    "MD", "MS", "MSW", "MSN", "MSc", "MA", "MBA", "MPA", "MPH", "MPP", "MDiv", "MEd", "MFA", "MHS",
    "BSN", "BS", "BA", "BSW",
    "RN", "LPN", "NP", "CNS", "CRNA", "CNM", "APRN", "FNP",
    "LCSW", "LMSW", "LMFT", "LPC", "LCPC", "LCMHC", "LMHC", "LPCC", "LSW",
    "BCBA", "CPA", "PE", "RA", "AIA", "FACHE", "FAAN", "FACP", "FACS",
    "PA-C", "PA", "OT", "PT", "DPT", "SLP", "CCC-SLP",
    "CADC", "CASAC", "CAP", "CRC", "CARN", "NCAC",
    "Jr", "Sr", "II", "III", "IV",
    "Esq", "Ret",
)

_CREDENTIAL_SET = frozenset(c.lower() for c in CREDENTIALS)
_ASIDE_RE = re.compile(r"\[.*?\]|\(.*?\)")
_WS_RE = re.compile(r"\s+")
_MULTI_AUTHOR_RE = re.compile(r"\band\b|[&;]", re.IGNORECASE)


def _clean_ws(s: Optional[str]) -> str:
    return _WS_RE.sub(" ", s or "").strip()


def is_credential(token: str) -> bool:
    """True when ``token`` (periods ignored, any case) is a credential/suffix."""
    return token.replace(".", "").lower() in _CREDENTIAL_SET


def strip_credentials(text: str) -> List[str]:
    """Whitespace tokens of ``text`` that are not credentials, original casing kept."""
    return [tok for tok in text.split() if not is_credential(tok)]


def normalize_name(name: Optional[str]) -> str:
    """
    Normalize a display name for comparison.

      normalize_name("Smith, John, MD")  -> "john smith"
      normalize_name("Jane A. Doe")      -> "jane a. doe"
      normalize_name("PhD")              -> ""
    """
    name = (name or "").strip()
    if not name:
        return ""

    name = _ASIDE_RE.sub("", name)

    if "," in name:
        name_parts: List[str] = []
        for part in name.split(","):
            kept = strip_credentials(part)
            if kept:
                name_parts.append(" ".join(kept))

        if len(name_parts) >= 2:
            surname = name_parts[0]
            given = " ".join(name_parts[1:])
            name = f"{given} {surname}"
        elif len(name_parts) == 1:
            name = name_parts[0]
        else:
            name = ""
    else:
        name = " ".join(strip_credentials(name))

    return _clean_ws(name).lower()


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_multi_author(name: Optional[str]) -> bool:
    """Rows naming several authors ("A and B", "A & B", "A; B") are never matched."""
    return bool(_MULTI_AUTHOR_RE.search(name or ""))
