"""
Patient store: lookups of patients by person.
"""

from typing import Optional
from sqlalchemy.orm import Session

from provider_management.models import Patient


def get_patient(db: Session, person_id: int) -> Optional[Patient]:
    """
    Get the Patient record of a person, voided or not.

    Args:
        db: Database session
        person_id: Person ID (also the patient's key)

    Returns:
        Patient object, or None if the person is not a patient
    """
    return db.get(Patient, person_id)


def get_active_patient(db: Session, person_id: int) -> Optional[Patient]:
    """
    Get the Patient record of a person unless it is voided.

    Returns:
        Patient object, or None if the person is not a patient or the patient is voided
    """
    patient = get_patient(db, person_id)
    if patient is None or patient.is_voided:
        return None
    return patient
