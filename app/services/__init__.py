"""
Interview Scheduler Services Module

Central access to the scheduling components. Each service owns one concern:
published availability, the booking record, allocation of requests to slots,
interview lifecycle, the availability read path, and notifications.
"""

# === Storage ===
from .slot_store_service import SlotStore
from .booking_ledger_service import BookingLedger
from .user_directory_service import UserDirectory

# === Allocation & Lifecycle ===
from .allocator_service import Allocator
from .lifecycle_service import LifecycleController

# === Read Path ===
from .availability_service import AvailabilityQueryService

# === Notifications ===
from .notification_service import NotificationDispatcher, SchedulingEvent

# === Facade ===
from .interview_scheduler_service import InterviewSchedulerService

# === Exported Interface ===
__all__ = [
    "SlotStore",
    "BookingLedger",
    "UserDirectory",
    "Allocator",
    "LifecycleController",
    "AvailabilityQueryService",
    "NotificationDispatcher",
    "SchedulingEvent",
    "InterviewSchedulerService",
]
