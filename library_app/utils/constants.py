from enum import Enum

# roles
ROLE_MEMBER = "member"
ROLE_LIBRARIAN = "librarian"
ROLE_ADMIN = "admin"
ROLES = (ROLE_MEMBER, ROLE_LIBRARIAN, ROLE_ADMIN)
STAFF_ROLES = (ROLE_ADMIN, ROLE_LIBRARIAN)

# borrow lifecycle
BORROW_BORROWED = "borrowed"
BORROW_RETURNED = "returned"
BORROW_OVERDUE = "overdue"
BORROW_LOST = "lost"
BORROW_CANCELLED = "cancelled"

LOAN_PERIOD_DAYS = 14
MAX_ACTIVE_BORROWS = 3
DEFAULT_EXTENSION_DAYS = 5

# fines
FINE_PENDING = "pending"
FINE_PARTIAL = "partial"
FINE_PAID = "paid"
FINE_WAIVED = "waived"
FINE_CANCELLED = "cancelled"
FINE_STATUSES = (FINE_PENDING, FINE_PARTIAL, FINE_PAID, FINE_WAIVED, FINE_CANCELLED)

FINE_PAYMENT_WINDOW_DAYS = 7

# profile update workflow
UPDATE_NONE = "none"
UPDATE_PENDING = "pending"
UPDATE_APPROVED = "approved"
UPDATE_REJECTED = "rejected"

ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"


class ProfileField(str, Enum):
    """User fields that can go through the update request workflow."""

    NAME = "name"
    USERNAME = "username"
    EMAIL = "email"
    PHONE = "phone"
    BIO = "bio"
    PROFILE_PICTURE = "profile_picture"


RESERVED_USERNAMES = ("admin", "superadmin")

# login lockout
MAX_FAILED_LOGINS = 5
LOCKOUT_MINUTES = 15
MIN_PASSWORD_LENGTH = 6

# books
BOOK_CATEGORIES = (
    "Fiction",
    "Non-Fiction",
    "Science",
    "Technology",
    "History",
    "Biography",
    "Children",
    "Poetry",
    "Other",
)
DEFAULT_CATEGORY = "Other"
DEFAULT_COVER_IMAGE = "https://via.placeholder.com/300x450?text=Book+Cover"

# mass-assignment guard for PUT /books/<id>
BOOK_UPDATABLE_FIELDS = (
    "title",
    "author",
    "isbn",
    "category",
    "publication_year",
    "total_copies",
    "available_copies",
    "cover_image",
    "description",
)

BOOK_SORT_FIELDS = ("title", "author", "publication_year", "created_at", "available_copies")

# largest value an INTEGER primary key can hold
MAX_ROW_ID = 2**63 - 1

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
