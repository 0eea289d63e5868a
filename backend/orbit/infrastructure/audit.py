"""Audit Sink — gateway decisions written to the structured log.

Invariants:
    - One log record per decision, on the "orbit.audit" logger
    - Records carry subject_id, role, decision as extra fields (JSONFormatter
      surfaces them); tokens are never included
    - Denials log at WARNING, allows at INFO
"""

import logging

from orbit.core.domain_types import Decision

AUDIT_LOGGER_NAME = "orbit.audit"


class LoggingAuditSink:
    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def record(
        self, subject_id: str | None, role: str | None, decision: Decision,
    ) -> None:
        level = logging.INFO if decision is Decision.ALLOW else logging.WARNING
        self._logger.log(
            level,
            f"Gateway decision: {decision.value}",
            extra={"subject_id": subject_id, "role": role, "decision": decision.value},
        )
