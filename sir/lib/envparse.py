"""
Safe parser for sir.env override files.

Reads KEY=value lines without shell execution. Values that look like
shell expansions are rejected so a checked-in sir.env can't smuggle
commands into AI_CMD.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',
    r'\|',          # pipes and OR chaining
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def read_env_file(path: Path) -> dict[str, str]:
    """
    Parse an env file into a dict. A missing file yields an empty dict.

    Lines may be prefixed with 'export '. Blank lines and # comments are skipped.

    Raises:
        ValueError: on malformed lines, bad keys or forbidden patterns
    """
    if not path.exists():
        return {}

    result = {}
    for lineno, raw in enumerate(path.read_text().splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        key, sep, value = line.partition('=')
        if not sep:
            raise ValueError(f"{path.name} line {lineno}: expected KEY=value")

        key = key.strip()
        if not KEY_PATTERN.match(key):
            raise ValueError(f"{path.name} line {lineno}: invalid key '{key}'")

        value = _unquote(value.strip())
        if any(re.search(p, value) for p in FORBIDDEN_PATTERNS):
            raise ValueError(f"{path.name} line {lineno}: forbidden pattern in value of {key}")

        result[key] = value

    return result


def parse_flag(value: str) -> bool:
    """Interpret a yes/no style env value.

    Raises:
        ValueError: if value isn't a recognised boolean spelling
    """
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: '{value}'")
