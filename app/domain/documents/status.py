"""Agreement document approval states"""

from enum import Enum


class DocumentStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED_SALESMAN = "approved_salesman"
    APPROVED_ADMIN = "approved_admin"


STATUS_LABELS = {
    DocumentStatus.DRAFT: "Draft",
    DocumentStatus.PENDING_APPROVAL: "Pending Approval",
    DocumentStatus.APPROVED_SALESMAN: "Approved by Salesman",
    DocumentStatus.APPROVED_ADMIN: "Approved by Admin",
}

# One step forward, plus sending a pending document back to draft
TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.DRAFT: frozenset({DocumentStatus.PENDING_APPROVAL}),
    DocumentStatus.PENDING_APPROVAL: frozenset({DocumentStatus.APPROVED_SALESMAN, DocumentStatus.DRAFT}),
    DocumentStatus.APPROVED_SALESMAN: frozenset({DocumentStatus.APPROVED_ADMIN}),
    DocumentStatus.APPROVED_ADMIN: frozenset(),
}


def parse_status(value) -> DocumentStatus:
    """Backend documents without a status are drafts"""
    if not value:
        return DocumentStatus.DRAFT
    return DocumentStatus(value)


def allowed_transitions(current: DocumentStatus) -> list[DocumentStatus]:
    return sorted(TRANSITIONS[current], key=lambda status: list(DocumentStatus).index(status))


def can_transition(current: DocumentStatus, target: DocumentStatus) -> bool:
    return target in TRANSITIONS[current]
