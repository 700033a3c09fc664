# app/models/branch_data.py
"""
Occupancy history table.
One row per branch per ingestion cycle, appended by the occupancy cycle.
branch_id holds the registry storage id; there is no FK table behind it.
"""

from sqlalchemy import Column, Integer, String, DateTime, Float
from app.database import Base


class BranchDataRow(Base):
    __tablename__ = "branch_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    branch_id = Column(Integer, nullable=False, index=True)
    last_updated = Column(DateTime, nullable=False)
    name = Column(String(100), nullable=False)
    status = Column(String(100), nullable=False, default="")
    current_percentage = Column(Float, nullable=False)

    def __repr__(self):
        return f"<BranchDataRow {self.id} branch={self.branch_id} pct={self.current_percentage}>"
