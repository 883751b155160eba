"""Input validation for CLI arguments.

Validators print a usage message to stderr and exit with code 2.
"""
import re
import sys
from typing import Tuple

SECRET_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')
# Bucket names: 3-63 chars, lowercase letters, digits, '-', '_' and '.', starting
# and ending with a letter or digit
BUCKET_NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9._-]{1,61}[a-z0-9]$')


def _usage_error(*lines: str) -> None:
    for line in lines:
        print(line, file=sys.stderr)
    sys.exit(2)


def validate_secret_name(name: str) -> None:
    """
    Validate secret name matches GCP requirements.

    GCP Secret Manager allows only: [a-zA-Z0-9_-]

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        _usage_error(
            "Error: Secret name cannot be empty",
            "\nSecret names must match: [a-zA-Z0-9_-]",
        )

    if not SECRET_NAME_PATTERN.match(name):
        _usage_error(
            f"Error: Invalid secret name '{name}'",
            "\nAllowed characters: letters, numbers, underscores (_), hyphens (-)",
            "Not allowed: dots (.), spaces, special characters (@, $, !, etc.)",
        )


def validate_secret_value(value: str) -> None:
    """
    Validate secret value is not empty.

    GCP Secret Manager does not allow empty secret payloads.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not value or value.strip() == "":
        _usage_error(
            "Error: Secret value cannot be empty",
            "\nGCP Secret Manager does not allow empty secret payloads.",
        )


def validate_bucket_name(name: str) -> None:
    """Validate bucket name against Cloud Storage naming rules."""
    if not BUCKET_NAME_PATTERN.match(name or ""):
        _usage_error(
            f"Error: Invalid bucket name '{name}'",
            "\nBucket names are 3-63 characters of lowercase letters, numbers,",
            "hyphens (-), underscores (_) and dots (.), and must start and end",
            "with a letter or number.",
        )


def parse_header(header: str) -> Tuple[str, str]:
    """
    Parse a 'Name: value' header argument.

    Raises:
        SystemExit with code 2 if the header has no name or no colon
    """
    name, sep, value = header.partition(":")
    if not sep or not name.strip():
        _usage_error(
            f"Error: Invalid header '{header}'",
            "\nHeaders must be given as 'Name: value'",
        )
    return name.strip(), value.strip()
