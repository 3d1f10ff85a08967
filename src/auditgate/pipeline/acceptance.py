"""Risk acceptance: time-bounded waivers for individual findings."""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import Any

from auditgate.types import AcceptanceRule, ExpiredAcceptance, Finding

logger = logging.getLogger(__name__)


def parse_expiry(value: Any) -> datetime | None:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            logger.warning("Unparsable acceptance expiry %r; treating rule as non-expiring", value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def compile_rules(entries: list[dict[str, Any]]) -> list[AcceptanceRule]:
    """Compile raw config entries once, preserving configured order."""
    rules: list[AcceptanceRule] = []
    for idx, entry in enumerate(entries):
        pattern = entry.get("idPattern")
        if not isinstance(pattern, str) or not pattern:
            logger.warning("Risk acceptance entry %d has no idPattern; ignoring", idx)
            continue
        try:
            regex = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            logger.warning("Risk acceptance entry %d has invalid pattern %r: %s", idx, pattern, e)
            continue
        rules.append(
            AcceptanceRule(
                id_pattern=pattern,
                regex=regex,
                expires=parse_expiry(entry.get("expires")),
                reason=str(entry.get("reason") or ""),
            )
        )
    return rules


def first_matching_rule(finding: Finding, rules: list[AcceptanceRule]) -> AcceptanceRule | None:
    return next((rule for rule in rules if rule.matches(finding)), None)


def apply_acceptance(
    findings: list[Finding],
    rules: list[AcceptanceRule],
    now: datetime,
) -> list[ExpiredAcceptance]:
    """Mark findings accepted; return the ones whose matching rule has expired.

    Only the first matching rule counts. An expired rule never accepts.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    expired: list[ExpiredAcceptance] = []
    for finding in findings:
        rule = first_matching_rule(finding, rules)
        if rule is None:
            continue
        if rule.is_expired(now):
            expired.append(ExpiredAcceptance(finding_id=finding.id, reason=rule.reason))
        else:
            finding.accepted = True
    return expired
