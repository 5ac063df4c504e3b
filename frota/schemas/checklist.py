"""
Schemas para envio de checklists
"""

from pydantic import BaseModel, validator
from typing import Dict, Optional, Union


class ChecklistSubmit(BaseModel):
    subject_type: str
    subject_id: int
    # KM (veículos) ou horímetro (empilhadeiras); aceita texto como "0006577"
    odometer_or_hourmeter: Optional[Union[int, str]] = None
    responses: Dict[str, str]
    defect_descriptions: Dict[str, str] = {}
    attachments: Dict[str, str] = {}
    notes: Optional[str] = None

    @validator('responses')
    def validate_responses(cls, v):
        if not v:
            raise ValueError('Responda os itens do checklist')
        return v
