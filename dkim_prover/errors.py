"""
Error kinds raised while building a prover record.

Every failure is fatal. The kinds are kept apart so a caller can tell which
precondition failed; the CLI maps each kind to its own exit code.
"""
import dkim


class ProverError(dkim.DKIMException):
    """Base class for dkim_prover errors."""
    exit_code = 1


class ConfigError(ProverError):
    """Invalid configuration value or config file."""
    exit_code = 2


class EncodingError(ProverError):
    """The message cannot be encoded into the fixed layout."""
    exit_code = 3


class MissingHeaderError(EncodingError):
    """A header required by the canonical header set is absent."""


class CapacityError(EncodingError):
    """A value does not fit into its fixed-size buffer."""


class UnsupportedAlgorithmError(EncodingError):
    """The DKIM-Signature uses a non RSA algorithm."""


class KeyResolutionError(ProverError):
    """The signer's public key could not be located."""
    exit_code = 4


class KeyNotFoundError(KeyResolutionError):
    """DNS has no usable DKIM key record."""


class DnsLookupError(KeyResolutionError):
    """The DNS query itself failed (timeout, transport error)."""


class MissingTagError(EncodingError, KeyResolutionError):
    """A required DKIM-Signature tag (s=, d= or b=) is absent."""
    exit_code = 4


class KeyFormatError(ProverError):
    """The DKIM key record or PEM block cannot be parsed into an RSA key."""
    exit_code = 5


class SignatureDecodeError(ProverError):
    """The b= tag is not valid base64."""
    exit_code = 6


class IndexingError(ProverError):
    """An expected substring was not found in the canonical header."""
    exit_code = 7


class ProverIOError(ProverError):
    """Reading the message or writing the prover record failed."""
    exit_code = 8
