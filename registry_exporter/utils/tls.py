"""TLS certificate loading and self-signed certificate generation."""

import datetime
import ipaddress
import logging
import ssl
import tempfile
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)
from cryptography.x509.oid import NameOID

from registry_exporter.exceptions import CertificateError

logger = logging.getLogger(__name__)

_RSA_KEY_SIZE = 2048


def generate_self_signed_pair(
    hostname: str = "localhost", days: int = 365
) -> tuple[bytes, bytes]:
    """Create a self-signed certificate and its RSA key.

    The certificate carries ``hostname`` as CN and SAN, plus the loopback
    addresses, so local scrapers can reach it by name or IP.

    Returns:
        (certificate PEM, private key PEM)
    """
    key = rsa.generate_private_key(public_exponent=65537, key_size=_RSA_KEY_SIZE)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, hostname)])
    now = datetime.datetime.now(datetime.timezone.utc)

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=days))
        .add_extension(
            x509.SubjectAlternativeName(
                [
                    x509.DNSName(hostname),
                    x509.IPAddress(ipaddress.ip_address("127.0.0.1")),
                    x509.IPAddress(ipaddress.ip_address("::1")),
                ]
            ),
            critical=False,
        )
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )

    cert_pem = cert.public_bytes(Encoding.PEM)
    key_pem = key.private_bytes(
        Encoding.PEM, PrivateFormat.TraditionalOpenSSL, NoEncryption()
    )
    return cert_pem, key_pem


def write_self_signed_pair(
    cert_file: str | Path,
    key_file: str | Path,
    hostname: str = "localhost",
    days: int = 365,
) -> None:
    """Generate a self-signed pair and write it as PEM files."""
    cert_pem, key_pem = generate_self_signed_pair(hostname, days)

    cert_path = Path(cert_file)
    key_path = Path(key_file)
    cert_path.write_bytes(cert_pem)
    key_path.write_bytes(key_pem)
    key_path.chmod(0o600)

    logger.info(
        "Wrote self-signed certificate",
        extra={"cert_file": str(cert_path), "key_file": str(key_path)},
    )


def write_ephemeral_pair(hostname: str = "localhost") -> tuple[str, str]:
    """Write a self-signed pair into a fresh temporary directory.

    The files live for the life of the process.

    Returns:
        (certificate path, key path)
    """
    directory = Path(tempfile.mkdtemp(prefix="registry-exporter-tls-"))
    cert_file = directory / "tls.crt"
    key_file = directory / "tls.key"
    write_self_signed_pair(cert_file, key_file, hostname=hostname, days=1)
    return str(cert_file), str(key_file)


def load_server_context(cert_file: str, key_file: str) -> ssl.SSLContext:
    """Build a server-side SSL context from a PEM certificate/key pair.

    Raises:
        CertificateError: If the files are missing or do not form a valid pair.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    try:
        context.load_cert_chain(certfile=cert_file, keyfile=key_file)
    except (OSError, ssl.SSLError) as e:
        raise CertificateError(cert_file, key_file, str(e)) from e

    logger.info(
        "Loaded TLS certificate",
        extra={"cert_file": cert_file, "key_file": key_file},
    )
    return context
