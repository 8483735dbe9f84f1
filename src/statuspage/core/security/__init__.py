"""Security utilities - password hashing and input validators.

Re-exports all security-related functions for convenience.
"""

from src.statuspage.core.security.crypto import hash_password, verify_password
from src.statuspage.core.security.validators import (
    is_valid_domain_host,
    make_slug,
    normalize_domain,
    normalize_domain_list,
    sanitize_disabled_tabs,
    split_domain_input,
    validate_project_slug_format,
)

__all__ = [
    # Crypto
    "hash_password",
    "verify_password",
    # Validators
    "is_valid_domain_host",
    "make_slug",
    "normalize_domain",
    "normalize_domain_list",
    "sanitize_disabled_tabs",
    "split_domain_input",
    "validate_project_slug_format",
]
