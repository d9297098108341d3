"""
Authentication Utilities
Small helpers shared by the sign-in flow.
"""


def normalize_email(email: str) -> str:
    """
    Normalize email address to lowercase.

    Args:
        email: Email address to normalize

    Returns:
        Lowercase email address
    """
    return email.strip().lower()
