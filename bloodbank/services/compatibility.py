"""
Blood Type Compatibility Helper
Determines which donor blood types can give to which recipient blood types
"""
from typing import List

BLOOD_TYPES = ['O-', 'O+', 'A-', 'A+', 'B-', 'B+', 'AB-', 'AB+']

# Recipient -> donor types it may safely receive from
COMPATIBLE_DONORS = {
    'O-': ['O-'],
    'O+': ['O-', 'O+'],
    'A-': ['O-', 'A-'],
    'A+': ['O-', 'O+', 'A-', 'A+'],
    'B-': ['O-', 'B-'],
    'B+': ['O-', 'O+', 'B-', 'B+'],
    'AB-': ['O-', 'A-', 'B-', 'AB-'],
    'AB+': ['O-', 'O+', 'A-', 'A+', 'B-', 'B+', 'AB-', 'AB+'],  # Universal recipient
}


def get_compatible_donors(recipient_blood_type: str) -> List[str]:
    """
    Get list of blood types that can donate to recipient

    Args:
        recipient_blood_type: Recipient's blood type (e.g., 'A+')

    Returns:
        List of compatible donor blood types, empty for unknown types
    """
    return list(COMPATIBLE_DONORS.get(recipient_blood_type, []))


def get_compatible_recipients(donor_blood_type: str) -> List[str]:
    """
    Get list of blood types that can receive from donor

    Args:
        donor_blood_type: Donor's blood type

    Returns:
        List of compatible recipient blood types, in BLOOD_TYPES order
    """
    return [
        recipient for recipient in BLOOD_TYPES
        if donor_blood_type in COMPATIBLE_DONORS[recipient]
    ]


def is_compatible(donor_blood_type: str, recipient_blood_type: str) -> bool:
    """Check if donor blood type is compatible with recipient."""
    return donor_blood_type in COMPATIBLE_DONORS.get(recipient_blood_type, [])
