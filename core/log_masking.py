"""
Log masking processor to prevent secrets and personal data from appearing in logs.
"""

import re
from typing import Any, Dict


# Patterns for sensitive data
SENSITIVE_PATTERNS = [
    # API Keys
    (r'(?i)(api[_-]?key["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', r'\1***MASKED***'),
    (r'(?i)(apikey["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', r'\1***MASKED***'),

    # Database passwords
    (r'(?i)(password["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', r'\1***MASKED***'),
    (r'(?i)(pwd["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', r'\1***MASKED***'),

    # Database URLs with passwords
    (r'(postgresql://[^:]+:)([^@]+)(@)', r'\1***MASKED***\3'),
    (r'(redis://[^:]*:)([^@]+)(@)', r'\1***MASKED***\3'),

    # Tokens
    (r'(?i)(token["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', r'\1***MASKED***'),
    (r'(?i)(bearer\s+)([A-Za-z0-9\-._~+/]+)', r'\1***MASKED***'),

    # Secrets
    (r'(?i)(secret["\']?\s*[:=]\s*["\']?)([^"\'\s,}]+)', r'\1***MASKED***'),

    # Email addresses
    (r'[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}', r'***EMAIL***'),
]

# Keys that should be masked in dictionaries
SENSITIVE_KEYS = [
    'api_key', 'apikey', 'api-key',
    'password', 'pwd', 'secret', 'token', 'authorization',
    'database_password', 'db_password',
    'database_url', 'db_url',
]

# Personal data keys dropped from event payloads before logging
PII_KEYS = ["email", "phone", "name", "address", "zipcode", "zip_code", "ssn", "taxid", "tax_id"]

MAX_LOGGED_STRING = 100


def _normalize_key(key: str) -> str:
    return key.lower().replace('_', '').replace('-', '')


def mask_string(text: str) -> str:
    """
    Mask sensitive data in a string.

    Args:
        text: Text to mask

    Returns:
        Masked text
    """
    if not isinstance(text, str):
        return text

    masked = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        masked = re.sub(pattern, replacement, masked)

    return masked


def mask_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Mask sensitive data in a dictionary.

    Args:
        data: Dictionary to mask

    Returns:
        Masked dictionary
    """
    if not isinstance(data, dict):
        return data

    masked = {}
    for key, value in data.items():
        key_lower = _normalize_key(str(key))
        is_sensitive = any(
            _normalize_key(sensitive_key) in key_lower
            for sensitive_key in SENSITIVE_KEYS
        )

        if is_sensitive:
            if isinstance(value, dict):
                masked[key] = mask_dict(value)
            else:
                masked[key] = "***MASKED***"
        else:
            masked[key] = mask_log_data(value)

    return masked


def mask_log_data(data: Any) -> Any:
    """
    Mask sensitive data in log data (handles dict, list, str, or other types).

    Args:
        data: Data to mask

    Returns:
        Masked data
    """
    if isinstance(data, dict):
        return mask_dict(data)
    elif isinstance(data, list):
        return [mask_log_data(item) for item in data]
    elif isinstance(data, str):
        return mask_string(data)
    else:
        return data


def sanitize_payload(payload: Any) -> Dict[str, Any]:
    """
    Strip personal data from an event payload and truncate long strings.

    Non-dict payloads are reported by type only.
    """
    if not isinstance(payload, dict):
        return {"_type": type(payload).__name__}

    pii = {_normalize_key(k) for k in PII_KEYS}
    sanitized: Dict[str, Any] = {}
    for key, value in payload.items():
        if _normalize_key(str(key)) in pii:
            continue
        if isinstance(value, str) and len(value) > MAX_LOGGED_STRING:
            sanitized[key] = value[:MAX_LOGGED_STRING] + "..."
        else:
            sanitized[key] = value
    return mask_dict(sanitized)
