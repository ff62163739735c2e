"""
Rate Limiting Module

Shared slowapi limiter for the login and access-request endpoints, keyed on
the client IP address. Disabled under the test environment.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from network_intel.core.environment import is_test

LOGIN_RATE_LIMIT = "20/minute"
ACCESS_REQUEST_RATE_LIMIT = "5/minute"

limiter = Limiter(key_func=get_remote_address, enabled=not is_test())
