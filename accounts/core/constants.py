import string

# All rate limit keys follow the pattern: ratelimit:{group}:{kind}:{identifier}
RATE_LIMIT_PREFIX = "ratelimit:"

REFRESH_TOKEN_LENGTH = 100
REFRESH_TOKEN_ALPHABET = string.ascii_letters + string.digits


class FieldSizes:
    # Common string lengths
    TINY = 20
    SHORT = 50
    MEDIUM = 255
    LONG = 1000

    # Specific field sizes
    EMAIL = MEDIUM
    USERNAME = TINY
    DISPLAY_NAME = SHORT
    PASSWORD = SHORT
    PASSWORD_HASH = LONG
    GROUP_NAME = SHORT
    TOKEN_STRING = REFRESH_TOKEN_LENGTH
    # Longest textual IPv6 address
    CLIENT_ADDRESS = 45
