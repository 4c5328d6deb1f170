"""
Print Job Model
===============

Record of one print attempt, kept in memory for GET /jobs.
"""

import uuid
from datetime import datetime
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


@dataclass
class PrintJob:
    """Print attempt and its outcome."""

    # Identification
    id: str = field(default_factory=lambda: f"JOB-{str(uuid.uuid4())[:8].upper()}")
    job_type: str = "sale"  # test, sale

    # Outcome
    status: str = "pending"  # pending, printing, completed, failed
    code: Optional[str] = None
    device: Optional[str] = None
    bytes_sent: int = 0
    error_message: Optional[str] = None

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'jobType': self.job_type,
            'status': self.status,
            'code': self.code,
            'device': self.device,
            'bytesSent': self.bytes_sent,
            'errorMessage': self.error_message,
            'createdAt': self.created_at.isoformat(),
            'completedAt': self.completed_at.isoformat() if self.completed_at else None,
        }

    def start(self, device: str):
        """Mark job as sent to a device."""
        self.status = "printing"
        self.device = device

    def complete(self, code: str, bytes_sent: int):
        """Mark job as completed."""
        self.status = "completed"
        self.code = code
        self.bytes_sent = bytes_sent
        self.completed_at = datetime.now()

    def fail(self, code: str, error: str):
        """Mark job as failed."""
        self.status = "failed"
        self.code = code
        self.error_message = error
        self.completed_at = datetime.now()
