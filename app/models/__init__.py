# Gym Occupancy Tracker — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.branch_data import BranchDataRow                    # noqa
from app.models.expected_attendance import ExpectedAttendanceRow    # noqa
