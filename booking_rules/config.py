"""Configuration for the booking portal rules and API glue.

Endpoints and tunables come from the environment (a local .env is honoured);
business constants are centralized here - modify as needed without touching code.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# API Configuration
ACCOUNT_API_BASE_URL = os.getenv("ACCOUNT_API_BASE_URL", "https://localhost:7095")
BOOKING_API_BASE_URL = os.getenv("BOOKING_API_BASE_URL", "https://localhost:7095")

HTTP_TIMEOUT_SECONDS = int(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
HTTP_MAX_RETRIES = int(os.getenv("HTTP_MAX_RETRIES", "3"))
HTTP_BACKOFF_FACTOR = float(os.getenv("HTTP_BACKOFF_FACTOR", "1.0"))

CIRCUIT_FAILURE_THRESHOLD = int(os.getenv("CIRCUIT_FAILURE_THRESHOLD", "5"))
CIRCUIT_TIMEOUT_SECONDS = int(os.getenv("CIRCUIT_TIMEOUT_SECONDS", "60"))

SLOT_CACHE_TTL_SECONDS = int(os.getenv("SLOT_CACHE_TTL_SECONDS", "300"))
SLOT_CACHE_MAX_SIZE = int(os.getenv("SLOT_CACHE_MAX_SIZE", "1000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MOCK_API_PORT = int(os.getenv("MOCK_API_PORT", "5000"))

# Bookings that still occupy a lawyer's calendar
ACTIVE_BOOKING_STATUSES = ("Pending", "Paid")

# One-hour slots shown on the lawyer calendar (lunch 12:00-13:00 excluded)
WORKING_DAY_SLOTS = [
    {"slotStartTime": "08:00:00", "slotEndTime": "09:00:00"},
    {"slotStartTime": "09:00:00", "slotEndTime": "10:00:00"},
    {"slotStartTime": "10:00:00", "slotEndTime": "11:00:00"},
    {"slotStartTime": "11:00:00", "slotEndTime": "12:00:00"},
    {"slotStartTime": "13:00:00", "slotEndTime": "14:00:00"},
    {"slotStartTime": "14:00:00", "slotEndTime": "15:00:00"},
    {"slotStartTime": "15:00:00", "slotEndTime": "16:00:00"},
    {"slotStartTime": "16:00:00", "slotEndTime": "17:00:00"},
]

# Working shifts a lawyer can request off
DEFAULT_SHIFTS = [
    {"shiftId": "shift-morning", "startTime": "08:00:00", "endTime": "12:00:00"},
    {"shiftId": "shift-evening", "startTime": "13:00:00", "endTime": "17:00:00"},
]

# Day-off requests are listed from today up to this many days ahead
DAY_OFF_LOOKAHEAD_DAYS = 90
