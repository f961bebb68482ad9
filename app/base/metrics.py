from prometheus_client import Counter


# === Scheduling Metrics ===

booking_attempts = Counter(
    "booking_attempts_total", "Booking attempts by mode and outcome",
    ["mode", "outcome"]
)

slot_conflicts = Counter(
    "slot_conflicts_total", "Bookings or reschedules that lost the race for a slot"
)

lifecycle_transitions = Counter(
    "lifecycle_transitions_total", "Interview status transitions",
    ["from_status", "to_status"]
)

slots_published = Counter(
    "slots_published_total", "Availability slots published by interviewers"
)

api_exception_counter = Counter(
    "api_exception_count", "Total API exceptions by type",
    ["type"]
)
