"""Stack settings supplied by the operator."""
import re
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator

# One DNS label: letters, digits and inner hyphens.
LABEL_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class StackSettings(BaseModel):
    """Domain, contact email and subdomains for the Mautic + n8n stack."""

    model_config = ConfigDict(extra='forbid')

    domain: str
    email: str
    mautic_subdomain: str = "m"
    n8n_subdomain: str = "n8n"

    @field_validator('domain')
    @classmethod
    def validate_domain(cls, v):
        """Require a bare dotted hostname (no scheme, path or port)."""
        v = v.strip().lower().rstrip('.')
        if not v:
            raise ValueError("--domain is required")
        if '://' in v or '/' in v or ':' in v:
            raise ValueError(f"Domain must be a bare hostname like example.com. Got: {v}")
        labels = v.split('.')
        if len(labels) < 2 or not all(LABEL_PATTERN.match(label) for label in labels):
            raise ValueError(f"Invalid domain name: {v}")
        return v

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("--email is required")
        if not EMAIL_PATTERN.match(v):
            raise ValueError(f"Invalid email address: {v}")
        return v

    @field_validator('mautic_subdomain', 'n8n_subdomain')
    @classmethod
    def validate_subdomain(cls, v):
        v = v.strip().lower()
        if not LABEL_PATTERN.match(v):
            raise ValueError(
                f"Subdomain '{v}' must be a single DNS label (letters, digits, hyphens)"
            )
        return v

    @property
    def mautic_host(self) -> str:
        return f"{self.mautic_subdomain}.{self.domain}"

    @property
    def n8n_host(self) -> str:
        return f"{self.n8n_subdomain}.{self.domain}"

    @property
    def hostnames(self) -> List[str]:
        """Hostnames that must point at this server, in display order."""
        return [self.mautic_host, self.n8n_host]
