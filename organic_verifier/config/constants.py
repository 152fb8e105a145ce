"""
Constants, enums, and static values.
"""

from enum import Enum


class SessionStatus(str, Enum):
    """Lifecycle states of a verification session."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.ERROR)


class CertificationStatus(str, Enum):
    """Per-operation certification outcome."""

    CERTIFIED = "Certified"
    NOT_CERTIFIED = "Not certified"
    FAILED = "Failed"


class ScopeName(str, Enum):
    """Certification categories listed on a registry record, in page order."""

    CROPS = "CROPS"
    HANDLING = "HANDLING"
    LIVESTOCK = "LIVESTOCK"
    WILD_CROPS = "WILD CROPS"


SCOPE_LABELS: tuple[str, ...] = tuple(scope.value for scope in ScopeName)

# Display sentinels
NOT_FOUND = "Not found"
NOT_CERTIFIED = CertificationStatus.NOT_CERTIFIED.value
ERROR_CERTIFIER = "Error"

# Cell values the registry uses for "nothing here"
PLACEHOLDER_VALUES = frozenset({"--", "n/a", ""})

# Page labels
OPERATION_NAME_LABEL = "Operation Name"
CERTIFIER_LABEL = "Certifier:"

# Items this short are table noise, not product names
MIN_PRODUCT_LENGTH = 3

EMPTY_BATCH_MESSAGE = "No operations to verify"
