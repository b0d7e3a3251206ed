from .db import db
from .infrastructure import Infrastructure, InfrastructureManager
from .slot import Slot, SlotKind, SlotStatus
from .question import InfrastructureQuestion, BookingAnswer
from .audit_log import AuditLog
