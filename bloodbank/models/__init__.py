# Database models
from .blood_inventory import BloodInventory
from .blood_request import BloodRequest, RequestStatus
from .appointment import Appointment, AppointmentStatus
from .donation import Donation
