# backend/provider_calendar/services/slots/rules.py
"""
Rule overlap validator, run when weekly rules are written.
"""

from typing import Iterable

from .conflicts import overlaps
from .entities import AvailabilityRule
from .errors import OK, ErrorCode, ValidationResult


def validate_rules_no_overlap(
    existing_rules: Iterable[AvailabilityRule],
    candidate: AvailabilityRule,
) -> ValidationResult:
    """
    Reject a candidate that overlaps an active rule on the same day.

    A rule sharing the candidate's id is the one being edited and is
    skipped. Inactive candidates never conflict.
    """
    if not candidate.is_active:
        return OK

    for rule in existing_rules:
        if not rule.is_active or rule.day_of_week != candidate.day_of_week:
            continue
        if candidate.id is not None and rule.id == candidate.id:
            continue
        if overlaps(rule.interval, candidate.interval):
            return ValidationResult.failure(
                ErrorCode.RULE_OVERLAP,
                f"Overlapping rules on {candidate.day_of_week.value}: "
                f"{rule.interval} overlaps with {candidate.interval}",
            )

    return OK


def validate_rule_set(
    existing_rules: Iterable[AvailabilityRule],
    candidate_rules: Iterable[AvailabilityRule],
) -> ValidationResult:
    """
    Validate a batch: every candidate against the existing rules and
    against the candidates before it. Fails on the first overlap, so a
    caller can accept all or nothing.

    For a bulk replacement pass no existing rules.
    """
    accepted = list(existing_rules)
    for candidate in candidate_rules:
        result = validate_rules_no_overlap(accepted, candidate)
        if not result:
            return result
        accepted.append(candidate)
    return OK
