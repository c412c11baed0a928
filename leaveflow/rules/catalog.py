from __future__ import annotations


# Stable ids attached to every rejection so logs and error payloads can be
# matched to the rule that produced them.
RULE_IDS: dict[str, str] = {
    "employee_not_found": "DIR-001",
    "invalid_range": "LR-001",
    "past_date": "LR-002",
    "overlap_conflict": "LR-003",
    "auto_rejected": "LR-004",
    "manager_required": "AUTH-001",
    "not_owner": "AUTH-002",
    "caller_required": "AUTH-003",
    "request_not_found": "LR-005",
    "not_pending": "LR-006",
    "invalid_status": "LR-007",
    "transition_not_allowed": "LR-008",
}
