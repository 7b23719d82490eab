from urllib.parse import urlparse

from ..exceptions import InvalidIssuer


def get_tenant_id(issuer: str) -> str:
    """
    Extract the tenant identifier from a FHIR issuer URL.

    The tenant is the last segment of the issuer's path, for example
    ``https://fhir-ehr-code.cerner.com/r4/ec2458f2-...`` gives ``ec2458f2-...``.

    Raises:
        InvalidIssuer: If the issuer is not an absolute http(s) URL or has no
            path segment to use as the tenant.
    """
    parsed = urlparse(issuer)

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidIssuer(f"Issuer is not an absolute URL: {issuer!r}")

    tenant_id = parsed.path.rstrip("/").split("/")[-1]

    if not tenant_id:
        raise InvalidIssuer(f"Issuer has no tenant segment: {issuer!r}")

    return tenant_id


def get_ehr_host(issuer: str) -> str:
    """Return the network location of the issuer, used to scope the token endpoint."""
    host = urlparse(issuer).netloc

    if not host:
        raise InvalidIssuer(f"Issuer is not an absolute URL: {issuer!r}")

    return host
