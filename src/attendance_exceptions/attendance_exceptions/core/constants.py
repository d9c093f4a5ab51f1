"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LIST_LIMIT = 200
MAX_REASON_LENGTH = 2000
MAX_NOTES_LENGTH = 2000
MAX_FILE_NAME_LENGTH = 512
FALLBACK_STEP_ORDER = 1
DOCTOR_APPROVER_NAME = "Doctor"
ATTACHMENTS_DIR = "attachments"
