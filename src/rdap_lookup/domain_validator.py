"""
Domain validation and normalization module.

Turns raw user input into a DomainQuery: trimmed, lowercase, IDNA-encoded
when it contains international characters, and matching the strict
label syntax (alphanumeric labels with optional internal hyphens, at
least two labels).
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from .enums import DomainValidationErrorCode
from .exceptions import ValidationError
from .models import DomainQuery


DOMAIN_PATTERN = re.compile(
    r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)+$"
)


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[DomainQuery]
    error: Optional[DomainValidationError]


class DomainValidator:
    """Validates and normalizes domain names."""

    def validate(self, raw_domain: Optional[str]) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with the DomainQuery or an error
        """
        if not raw_domain or not raw_domain.strip():
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.EMPTY_INPUT,
                    message="Domain parameter is required",
                    details={"raw_input": raw_domain},
                ),
            )

        try:
            canonical = self.normalize_to_canonical(raw_domain)
        except ValidationError as e:
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR,
                    message=e.message,
                    details=e.details,
                ),
            )

        if not DOMAIN_PATTERN.fullmatch(canonical):
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.INVALID_SYNTAX,
                    message="Invalid domain format",
                    details={"raw_input": raw_domain, "canonical": canonical},
                ),
            )

        return DomainValidationResult(
            valid=True,
            canonical_domain=DomainQuery(name=canonical, tld=canonical.rsplit(".", 1)[1]),
            error=None,
        )

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (trimmed, lowercase, IDNA if needed).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.strip().lower()

        if not any(ord(c) > 127 for c in domain_lower):
            return domain_lower

        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )
