"""
Service-wide constants
"""

SERVICE_NAME = "ops-desk-backend"

# Attendance error codes
ALREADY_CLOCKED_IN = "ALREADY_CLOCKED_IN"
NOT_CLOCKED_IN = "NOT_CLOCKED_IN"
BREAK_ALREADY_STARTED = "BREAK_ALREADY_STARTED"
BREAK_NOT_STARTED = "BREAK_NOT_STARTED"
BREAK_ALREADY_ENDED = "BREAK_ALREADY_ENDED"
BREAK_TOO_LONG = "BREAK_TOO_LONG"
ALREADY_CLOCKED_OUT = "ALREADY_CLOCKED_OUT"
BREAK_IN_PROGRESS = "BREAK_IN_PROGRESS"
NO_RECORD_FOUND = "NO_RECORD_FOUND"
MISSING_DATE = "MISSING_DATE"
TIMESTAMP_BEFORE_LAST_EVENT = "TIMESTAMP_BEFORE_LAST_EVENT"

# Task error codes
VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
NOT_COMPLETED = "NOT_COMPLETED"
SELF_APPROVAL = "SELF_APPROVAL"
EMPTY_CONTENT = "EMPTY_CONTENT"

# Auth error codes
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
EMAIL_TAKEN = "EMAIL_TAKEN"
INACTIVE_USER = "INACTIVE_USER"
