from .errors import BookingError
from .policy import BookingPolicy, current_policy
from .capacity import day_availability, slot_availability, range_availability, effective_capacity
from .admission import create_booking, reschedule_booking
from .lifecycle import cancel_booking, complete_booking, search_bookings, get_booking
from .tickets import allocate_ticket, format_ticket, parse_ticket
