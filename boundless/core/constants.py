"""Global constants for the boundless application."""

# Collection names
ORGANIZATIONS_COLLECTION = "organizations"
HACKATHONS_COLLECTION = "hackathons"
PARTICIPANTS_COLLECTION = "participants"
JUDGING_SCORES_COLLECTION = "judging_scores"

# Organization roles allowed to manage hackathons
ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"
MANAGER_ROLES = (ROLE_OWNER, ROLE_ADMIN)

# Submission review states
SUBMISSION_SUBMITTED = "submitted"
SUBMISSION_SHORTLISTED = "shortlisted"
SUBMISSION_DISQUALIFIED = "disqualified"

# Firestore limits
FIRESTORE_IN_QUERY_LIMIT = 30
FIRESTORE_MAX_INTEGER = 2**63 - 1

# Judging
MIN_CRITERION_SCORE = 0
MAX_CRITERION_SCORE = 100

# Pagination
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# Prize tiers
DEFAULT_PRIZE_CURRENCY = "USDC"

# Caching (seconds)
DEFAULT_HACKATHON_CACHE_TTL = 300

# Notifications
DEFAULT_FRONTEND_URL = "https://boundlessfi.xyz"

# Email-related constants
SMTP_AUTH_ERROR_CODE = 534
