"""
Token-level handling of KPI formulas.

Equations reference other KPIs with ``[KPI:<uuid>]`` or ``[KPI:<name>]``.
This module only finds and substitutes those tokens; evaluating the resulting
arithmetic is left to the caller.
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)

_UUID = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

KPI_REFERENCE_RE = re.compile(r"\[KPI:(" + _UUID + r"|[^\]]+?)\]")
UUID_RE = re.compile(r"^" + _UUID + r"$")


@dataclass(frozen=True)
class KpiReference:
    identifier: str
    is_id: bool
    original_match: str


def extract_references(equation: Optional[str]) -> List[KpiReference]:
    """Return every well-formed reference in left-to-right order, duplicates included."""
    if not equation:
        return []
    references = []
    for match in KPI_REFERENCE_RE.finditer(equation):
        identifier = match.group(1).strip()
        references.append(
            KpiReference(
                identifier=identifier,
                is_id=bool(UUID_RE.match(identifier)),
                original_match=match.group(0),
            )
        )
    if references:
        logger.debug(f"🧮 [Formula] Extracted {len(references)} references from '{equation}'")
    return references


def substitute(equation: Optional[str], values: Mapping[str, Optional[str]]) -> str:
    """Replace each reference whose identifier is in ``values``.

    A ``None`` value becomes ``"0"``. Identifiers missing from the mapping keep
    their token untouched.
    """
    if not equation:
        return equation or ""
    result = equation
    for ref in extract_references(equation):
        if ref.identifier not in values:
            continue
        value = values[ref.identifier]
        replacement = "0" if value is None else str(value)
        result = result.replace(ref.original_match, replacement)
    logger.debug(f"🧮 [Formula] '{equation}' -> '{result}'")
    return result
