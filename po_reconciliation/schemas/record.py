"""
Record-store envelope shared by every stored entity.
"""

from typing import Optional
from pydantic import BaseModel
from datetime import datetime


class StoredRecord(BaseModel):
    """Identifier and timestamps assigned by the record store."""
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
