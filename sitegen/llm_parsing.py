from __future__ import annotations

import enum
import json
import logging
import math
import re
from typing import Any, Dict, List, NamedTuple, Optional, TypedDict

log = logging.getLogger(__name__)


class GeneratedSite(TypedDict):
    html: str
    css: str
    js: str
    backend: str
    schema: str


PLACEHOLDERS: GeneratedSite = {
    "html": "<html>Failed to generate HTML</html>",
    "css": "/* Failed to generate CSS */",
    "js": "// Failed to generate JS",
    "backend": "",
    "schema": "{}",
}

_HTML_RE = re.compile(r"```html\n([\s\S]*?)\n```")
_CSS_RE = re.compile(r"```css\n([\s\S]*?)\n```")
_JS_RE = re.compile(r"```javascript\n([\s\S]*?)\n```")
_JSON_RE = re.compile(r"```json\n([\s\S]*?)\n```")


class ParseStrategy(str, enum.Enum):
    STRICT_JSON = "strict_json"
    FENCED_BLOCKS = "fenced_blocks"


class NormalizedReply(NamedTuple):
    strategy: ParseStrategy
    site: Dict[str, Any]


def _reject_constant(name: str) -> Any:
    # NaN/Infinity (and overflowing floats) are not JSON and cannot be echoed back to the caller
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"number out of range {literal}")
    return value


def _strict_parse(text: str) -> Optional[Dict[str, Any]]:
    """Parse the whole reply as one JSON object; None if it is anything else."""
    try:
        data = json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except (TypeError, ValueError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None
    return data


def _first_group(pattern: re.Pattern, text: str) -> Optional[str]:
    m = pattern.search(text)
    return m.group(1) if m else None


def extract_code_blocks(text: str) -> GeneratedSite:
    """Pull the five fields out of fenced code blocks.

    Two ```javascript blocks are read as frontend first, backend second.
    Any field without a matching block gets its placeholder.
    """
    t = text if isinstance(text, str) else ""
    js_blocks: List[str] = _JS_RE.findall(t)

    html = _first_group(_HTML_RE, t)
    css = _first_group(_CSS_RE, t)
    schema = _first_group(_JSON_RE, t)

    return {
        "html": html if html is not None else PLACEHOLDERS["html"],
        "css": css if css is not None else PLACEHOLDERS["css"],
        "js": js_blocks[0] if js_blocks else PLACEHOLDERS["js"],
        "backend": js_blocks[1] if len(js_blocks) > 1 else PLACEHOLDERS["backend"],
        "schema": schema if schema is not None else PLACEHOLDERS["schema"],
    }


def normalize_reply(text: str) -> NormalizedReply:
    """Strict JSON object first, fenced-block scan otherwise. Never raises."""
    parsed = _strict_parse(text)
    if parsed is not None:
        log.debug("normalize: strict JSON object with keys=%s", sorted(parsed))
        return NormalizedReply(ParseStrategy.STRICT_JSON, parsed)
    site = extract_code_blocks(text)
    missing = [k for k, v in site.items() if v == PLACEHOLDERS[k]]
    log.debug("normalize: fenced-block fallback missing=%s", missing)
    return NormalizedReply(ParseStrategy.FENCED_BLOCKS, dict(site))
