# Import all models so Base.metadata is complete for create_all()
from .user import User  # noqa: F401
from .patient import Patient  # noqa: F401
from .appointment import Appointment  # noqa: F401
from .medicine import Medicine  # noqa: F401
from .medical_record import MedicalRecord, PrescribedMedication  # noqa: F401
from .dispense import Dispense  # noqa: F401
