import secrets, string
ALPHABET = string.ascii_uppercase + string.digits
PREFIX = "TRK-"

def generate_tracking_code(length: int = 8) -> str:
    """Human-readable payment reference. Display only: never used as a lookup key."""
    return PREFIX + "".join(secrets.choice(ALPHABET) for _ in range(length))
