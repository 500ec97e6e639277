"""
Role assignment via Firebase custom claims.

Each email is looked up and gets ``{"role": <role>}`` attached as a custom
claim. A failure for one user is recorded against that user and the batch
carries on; the caller gets one tagged result per assignment, in order.

Claims reach a client only after that client signs out and back in.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from booking_ops.constants import KNOWN_ROLES, ROLE_CLAIM
from booking_ops.exceptions import ItemError
from booking_ops.monitoring.logger import get_logger

logger = get_logger(__name__)

REAUTH_NOTE = "Users need to sign out and sign in again for roles to take effect"


@dataclass(frozen=True)
class RoleAssignment:
    email: str
    role: str

    @classmethod
    def parse(cls, text: str) -> "RoleAssignment":
        """Parse ``email=role``."""
        email, sep, role = text.partition("=")
        email, role = email.strip(), role.strip()
        if not sep or not email or not role:
            raise ValueError(f"Expected email=role, got {text!r}")
        return cls(email=email, role=role)


@dataclass(frozen=True)
class RoleAssignmentResult:
    """Outcome of one assignment: ``ok`` with a uid, or not ok with an error."""

    assignment: RoleAssignment
    ok: bool
    uid: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, assignment: RoleAssignment, uid: str) -> "RoleAssignmentResult":
        return cls(assignment=assignment, ok=True, uid=uid)

    @classmethod
    def failure(cls, assignment: RoleAssignment, error: str) -> "RoleAssignmentResult":
        return cls(assignment=assignment, ok=False, error=error)


@dataclass
class RoleAssignmentSummary:
    results: List[RoleAssignmentResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded

    @property
    def failures(self) -> List[RoleAssignmentResult]:
        return [r for r in self.results if not r.ok]


def assign_role(client, assignment: RoleAssignment) -> RoleAssignmentResult:
    """
    Look up ``assignment.email`` and set its role claim.

    Args:
        client: ``IdentityClient`` (or anything with the same two methods)
        assignment: Email and role to apply

    Returns:
        A success result with the uid, or a failure result with the error text
    """
    if assignment.role not in KNOWN_ROLES:
        logger.warning("Assigning a role the apps do not know", email=assignment.email, role=assignment.role)

    try:
        uid = client.get_uid_by_email(assignment.email)
        client.set_custom_claims(uid, {ROLE_CLAIM: assignment.role})
    except Exception as e:
        err = ItemError(assignment.email, str(e))
        logger.error("Role assignment failed", email=assignment.email, role=assignment.role, error=err.message)
        return RoleAssignmentResult.failure(assignment, err.message)

    logger.info("Role assigned", email=assignment.email, role=assignment.role, uid=uid)
    return RoleAssignmentResult.success(assignment, uid)


def assign_roles(client, assignments: Iterable[RoleAssignment]) -> RoleAssignmentSummary:
    """Apply every assignment in order; failures never stop the batch."""
    summary = RoleAssignmentSummary()
    for assignment in assignments:
        summary.results.append(assign_role(client, assignment))
    logger.info("Role assignment finished", succeeded=summary.succeeded, failed=summary.failed)
    return summary
