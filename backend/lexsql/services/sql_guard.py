"""Read-only guard for model-generated SQL.

Two pieces run on every generated query before it reaches the database:

* ``normalize_identifiers`` fixes the quoting and casing of the two
  case-sensitive columns of ``legalprompt``;
* ``validate_query`` rejects anything that is not a single SELECT.

The validator is a keyword denylist, not a parser. It over-rejects (a
SELECT filtering on the literal ``'delete me'`` fails) and can be bypassed by
encoding tricks. Both are known limitations.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from ..core.errors import ValidationFailure

logger = logging.getLogger(__name__)

# canonical name -> spellings models produce for it
CASE_SENSITIVE_COLUMNS = {
    "createdAt": ("createdat", "created_at"),
    "systemMessage": ("systemmessage", "system_message"),
}


def _identifier_patterns(spellings):
    names = "(?:" + "|".join(spellings) + ")"
    # the quotes must wrap exactly the name: "createdAt day" is another identifier
    quoted_run = re.compile(
        rf'(?<![\w"])(?:"+{names}"+|{names}"{{2,}}|"{{2,}}{names})(?![\w"])', re.IGNORECASE
    )
    bare = re.compile(rf"\b{names}\b", re.IGNORECASE)
    return quoted_run, bare


_IDENTIFIER_PATTERNS = {
    canonical: _identifier_patterns(spellings)
    for canonical, spellings in CASE_SENSITIVE_COLUMNS.items()
}

# quoted identifiers and string literals, left untouched by the bare-name pass
_QUOTED_SPAN = re.compile(r"(\"[^\"]*\"|'[^']*')")

FORBIDDEN_KEYWORDS = ("drop", "delete", "insert", "update", "truncate", "alter")

_SUSPICIOUS_PATTERNS = [
    r"--",
    r"/\*",
    r"\*/",
    r"\bunion\b",
    r"\bexec(?:ute)?\b",
    r"\bgrant\b",
    r"\brevoke\b",
    r"\bpg_sleep\b",
    r";\s*\S",  # a second statement
]


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: Optional[str] = None
    keyword: Optional[str] = None


def normalize_identifiers(sql: str) -> str:
    """Double-quote createdAt / systemMessage with their exact casing.

    Collapses stray runs of quotes around them. Longer identifiers that merely
    contain the names, other quoted identifiers and string literals are left
    alone.
    """
    for canonical, (quoted_run, bare) in _IDENTIFIER_PATTERNS.items():
        quoted = f'"{canonical}"'
        fixed = quoted_run.sub(quoted, sql)
        parts = _QUOTED_SPAN.split(fixed)
        parts[::2] = [bare.sub(quoted, part) for part in parts[::2]]
        fixed = "".join(parts)
        if fixed != sql:
            logger.debug("Normalized column %s", quoted)
        sql = fixed
    return sql


def validate_query(sql: str) -> ValidationResult:
    lowered = sql.strip().lower()

    if not lowered.startswith("select"):
        return ValidationResult(False, "Only SELECT queries are allowed")

    for keyword in FORBIDDEN_KEYWORDS:
        if keyword in lowered:
            return ValidationResult(False, f"Forbidden keyword: {keyword.upper()}", keyword)

    for pattern in _SUSPICIOUS_PATTERNS:
        if re.search(pattern, lowered):
            return ValidationResult(False, "Suspicious pattern detected in query")

    return ValidationResult(True)


def ensure_valid(sql: str) -> str:
    verdict = validate_query(sql)
    logger.debug("Validation verdict for %r: %s", sql, verdict)
    if not verdict.valid:
        raise ValidationFailure(verdict.reason, keyword=verdict.keyword)
    return sql
