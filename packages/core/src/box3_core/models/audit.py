"""Audit trail models for deduplication runs.

Every merge the engine performs and every pair it hands to a human reviewer
is recorded here, so an advisor can see why an asset disappeared from the
dossier or why two records need a second look.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


def _ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuditSeverity(str, Enum):
    """Severity levels for audit warnings."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEntry(BaseModel):
    """A change the engine applied to the asset collection.

    Attributes:
        timestamp: When this entry was created (UTC)
        step: Processing step (e.g., "merge")
        action: Human-readable description of what was done
        asset_ids: Records involved, kept record first
        match_level: Match level that justified the action
        notes: Additional context
    """
    timestamp: datetime = Field(default_factory=_utc_now)
    step: str
    action: str
    asset_ids: list[str] = Field(default_factory=list)
    match_level: Optional[str] = None
    notes: Optional[str] = None

    normalize_timestamp = field_validator("timestamp")(_ensure_utc)


class AuditWarning(BaseModel):
    """A finding that needs human review before the dossier is finalized.

    Attributes:
        timestamp: When this warning was created (UTC)
        code: Machine-readable code (e.g., "REVIEW_MATCH", "OWNERSHIP_CONFLICT")
        message: Human-readable message
        asset_ids: Records the warning is about
        severity: Warning severity level
        requires_review: Whether this must be reviewed before finalizing
        suggested_action: Recommended action for the reviewer
    """
    timestamp: datetime = Field(default_factory=_utc_now)
    code: str
    message: str
    asset_ids: list[str] = Field(default_factory=list)
    severity: AuditSeverity = AuditSeverity.WARNING
    requires_review: bool = True
    suggested_action: Optional[str] = None

    normalize_timestamp = field_validator("timestamp")(_ensure_utc)


class AuditTrail(BaseModel):
    """Audit trail for a single deduplication run.

    Attributes:
        run_id: Unique identifier for this run
        started_at: When the run started (UTC)
        completed_at: When the run completed (UTC), None while running
        status: "running" or "completed"
        entries: Applied changes
        warnings: Findings for the reviewer
        metadata: Additional metadata about the run
    """
    run_id: str
    started_at: datetime = Field(default_factory=_utc_now)
    completed_at: Optional[datetime] = None
    status: str = "running"
    entries: list[AuditEntry] = Field(default_factory=list)
    warnings: list[AuditWarning] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)

    normalize_timestamps = field_validator("started_at", "completed_at")(_ensure_utc)

    def add_entry(
        self,
        step: str,
        action: str,
        asset_ids: Optional[list[str]] = None,
        match_level: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AuditEntry:
        """Record an applied change and return it."""
        entry = AuditEntry(
            step=step,
            action=action,
            asset_ids=asset_ids or [],
            match_level=match_level,
            notes=notes,
        )
        self.entries.append(entry)
        return entry

    def add_warning(
        self,
        code: str,
        message: str,
        asset_ids: Optional[list[str]] = None,
        severity: AuditSeverity = AuditSeverity.WARNING,
        requires_review: bool = True,
        suggested_action: Optional[str] = None,
    ) -> AuditWarning:
        """Record a finding for the reviewer and return it."""
        warning = AuditWarning(
            code=code,
            message=message,
            asset_ids=asset_ids or [],
            severity=severity,
            requires_review=requires_review,
            suggested_action=suggested_action,
        )
        self.warnings.append(warning)
        return warning

    def complete(self) -> None:
        """Mark the run as complete."""
        self.completed_at = _utc_now()
        self.status = "completed"

    @property
    def requires_review(self) -> bool:
        """Check if any warning requires human review."""
        return any(w.requires_review for w in self.warnings)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Duration of the run in seconds, None while running."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def get_entries_for_asset(self, asset_id: str) -> list[AuditEntry]:
        return [e for e in self.entries if asset_id in e.asset_ids]

    def get_warnings_for_asset(self, asset_id: str) -> list[AuditWarning]:
        return [w for w in self.warnings if asset_id in w.asset_ids]

    def summary(self) -> dict[str, object]:
        """Generate a summary of the trail.

        Returns:
            Dictionary with summary statistics
        """
        return {
            "run_id": self.run_id,
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "entry_count": len(self.entries),
            "warning_count": len(self.warnings),
            "requires_review": self.requires_review,
        }
