"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SESSION_TTL_HOURS = 24
SESSION_TOKEN_BYTES = 32
SESSION_COOKIE_NAME = "sessionId"
SESSION_HEADER_NAME = "X-Session-Id"

MIN_PASSWORD_LENGTH = 6

DEFAULT_ATTENDANCE_LIMIT = 100
DEFAULT_STUDENT_HISTORY_LIMIT = 50
LATEST_ATTENDANCE_LIMIT = 10

ASSIGNMENT_LOCK_NAME = "rfid_attendance.teacher_classes"
ASSIGNMENT_LOCK_TIMEOUT_SECONDS = 10

READ_RETRY_ATTEMPTS = 2

UNKNOWN_STUDENT_NAME = "Unknown Student"
UNKNOWN_CLASS_NAME = "N/A"

# Column widths in database/schema.sql.
MAX_USERNAME_LENGTH = 64
MAX_NAME_LENGTH = 120
MAX_EMAIL_LENGTH = 190
MAX_CLASS_NAME_LENGTH = 64
MAX_CARD_ID_LENGTH = 64
MAX_ROLL_NUMBER_LENGTH = 32
