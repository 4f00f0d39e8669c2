"""
Environment variable validator for Leadlens.
Checks the configuration before the API starts.
"""

import os
import re
import sys
from typing import List, Tuple

from core.config import ENGAGEMENT_STORES


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DATABASE_URL_PREFIXES = ("postgresql://", "postgres://", "postgresql+psycopg2://", "sqlite://")

# Variables that must be set in production
PRODUCTION_ENV_VARS = {
    "API_KEY": "API key for dashboard endpoints (must not be the development default)",
}

# Optional environment variables
OPTIONAL_ENV_VARS = {
    "ENGAGEMENT_STORE": "Profile store backend: memory or database (defaults to 'memory')",
    "DATABASE_URL": "Database URL (or use DATABASE_HOST, DATABASE_USER, etc.)",
    "DATABASE_HOST": "Database host (defaults to 'localhost')",
    "DATABASE_PORT": "Database port (defaults to 5432)",
    "DATABASE_NAME": "Database name (defaults to 'leadlens')",
    "DATABASE_USER": "Database user (defaults to 'leadlens')",
    "DATABASE_PASSWORD": "Database password (defaults to 'leadlens')",
    "MAX_EVENT_FUTURE_SKEW_SECONDS": "How far in the future an event timestamp may be (defaults to 300)",
    "LOG_LEVEL": "Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL (defaults to 'INFO')",
    "LOG_FILE": "Log file path (defaults to 'logs/app.log')",
    "ENVIRONMENT": "Environment: development or production (defaults to 'development')",
    "REDIS_HOST": "Redis host for shared rate limiting (in-memory limiter when unset)",
    "READ_RATE_LIMIT": "Rate limit for dashboard reads (defaults to '120/minute')",
    "COLLECTOR_URL": "Event collector URL used by the engagement client",
}


def validate_production_env() -> Tuple[bool, List[str]]:
    """
    Validate variables that only matter in production.

    Returns:
        Tuple of (is_valid, list_of_issues)
    """
    issues = []
    if os.getenv("ENVIRONMENT", "development").lower() != "production":
        return True, issues

    api_key = os.getenv("API_KEY")
    if not api_key or api_key == "dev_api_key":
        issues.append("API_KEY must be set to a non-default value in production")

    return len(issues) == 0, issues


def validate_database_config() -> Tuple[bool, List[str]]:
    """
    Validate database configuration.
    Only checked when the database store is selected.

    Returns:
        Tuple of (is_valid, list_of_issues)
    """
    issues = []

    if os.getenv("ENGAGEMENT_STORE", "memory").lower() != "database":
        return True, issues

    database_url = os.getenv("DATABASE_URL")
    if database_url and not database_url.startswith(DATABASE_URL_PREFIXES):
        issues.append(
            "DATABASE_URL must start with one of: " + ", ".join(DATABASE_URL_PREFIXES)
        )

    return len(issues) == 0, issues


def validate_settings() -> Tuple[bool, List[str]]:
    """
    Validate enumerated and numeric settings.

    Returns:
        Tuple of (is_valid, list_of_issues)
    """
    issues = []

    store = os.getenv("ENGAGEMENT_STORE")
    if store and store.lower() not in ENGAGEMENT_STORES:
        issues.append(f"ENGAGEMENT_STORE must be one of: {', '.join(ENGAGEMENT_STORES)}")

    log_level = os.getenv("LOG_LEVEL")
    if log_level and log_level.upper() not in LOG_LEVELS:
        issues.append(f"LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}")

    skew = os.getenv("MAX_EVENT_FUTURE_SKEW_SECONDS")
    if skew and not re.fullmatch(r"\d+", skew.strip()):
        issues.append("MAX_EVENT_FUTURE_SKEW_SECONDS must be a non-negative integer")

    return len(issues) == 0, issues


def validate_all() -> Tuple[bool, List[str]]:
    """
    Validate all environment variables.

    Returns:
        Tuple of (is_valid, list_of_issues)
    """
    all_issues = []

    for check in (validate_settings, validate_database_config, validate_production_env):
        _, issues = check()
        all_issues.extend(issues)

    return len(all_issues) == 0, all_issues


def print_validation_report(verbose: bool = False) -> None:
    """
    Print a validation report of environment variables.

    Args:
        verbose: If True, show all variables (including optional)
    """
    print("=" * 60)
    print("Leadlens Environment Variable Validation")
    print("=" * 60)
    print()

    print("Store Configuration:")
    print("-" * 60)
    store = os.getenv("ENGAGEMENT_STORE", "memory")
    print(f"  ✓ USING    ENGAGEMENT_STORE - {store}")

    if store.lower() == "database":
        database_url = os.getenv("DATABASE_URL")
        if database_url:
            print("  ✓ SET      DATABASE_URL - Using full database URL")
            if verbose:
                masked_url = re.sub(r'(://[^:]+:)([^@]+)(@)', r'\1***MASKED***\3', database_url)
                print(f"              Value: {masked_url}")
        else:
            print("  ⚠ USING    DATABASE_URL - Using individual parts (with defaults)")
            if verbose:
                print(f"              DATABASE_HOST: {os.getenv('DATABASE_HOST', 'localhost')}")
                print(f"              DATABASE_PORT: {os.getenv('DATABASE_PORT', '5432')}")
                print(f"              DATABASE_NAME: {os.getenv('DATABASE_NAME', 'leadlens')}")
                print(f"              DATABASE_USER: {os.getenv('DATABASE_USER', 'leadlens')}")
                print("              DATABASE_PASSWORD: ***MASKED***")
    print()

    if verbose:
        print("Production Variables:")
        print("-" * 60)
        for var, description in PRODUCTION_ENV_VARS.items():
            status = "✓ SET" if os.getenv(var) else "✗ MISSING"
            print(f"  {status:12} {var:30} - {description}")
        print()

        print("Optional Variables:")
        print("-" * 60)
        for var, description in OPTIONAL_ENV_VARS.items():
            value = os.getenv(var)
            status = "✓ SET" if value else "○ NOT SET (using default)"
            print(f"  {status:12} {var:30} - {description}")
        print()

    print("Validation Summary:")
    print("-" * 60)
    is_valid, issues = validate_all()

    if is_valid:
        print("  ✓ Environment configuration is valid!")
    else:
        print("  ✗ Invalid environment configuration:")
        for issue in issues:
            print(f"    - {issue}")
        print()
        print("  Please fix these variables in your .env file or environment.")

    print("=" * 60)


def validate_and_exit(exit_on_error: bool = True) -> bool:
    """
    Validate environment and optionally exit on error.

    Args:
        exit_on_error: If True, exit with code 1 on validation failure

    Returns:
        True if valid, False otherwise
    """
    is_valid, issues = validate_all()

    if not is_valid:
        print("\n❌ Environment validation failed!")
        print("\nInvalid environment variables:")
        for issue in issues:
            print(f"  - {issue}")
        print("\nPlease check your .env file or environment variables.")
        print("Run 'python scripts/validate_env.py' for a detailed report.")

        if exit_on_error:
            sys.exit(1)

    return is_valid
