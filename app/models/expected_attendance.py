# app/models/expected_attendance.py
"""
Expected attendance forecast table.
Holds the latest 16 hourly slots per branch. Refreshed by the attendance
cycle with delete-then-insert, normally once per day.
"""

from sqlalchemy import Column, Integer, Float
from app.database import Base


class ExpectedAttendanceRow(Base):
    __tablename__ = "expected_attendance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    branch_id = Column(Integer, nullable=False, index=True)
    hour = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)
    remaining = Column(Float)

    def __repr__(self):
        return f"<ExpectedAttendanceRow {self.id} branch={self.branch_id} hour={self.hour}>"
