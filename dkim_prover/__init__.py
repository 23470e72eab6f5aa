"""
dkim_prover - prepares DKIM signed email headers, key and signature as
fixed-layout inputs for a zero-knowledge DKIM verification circuit.
"""
from dkim_prover.config import ProverConfig, load_config
from dkim_prover.errors import (
    CapacityError,
    ConfigError,
    DnsLookupError,
    EncodingError,
    IndexingError,
    KeyFormatError,
    KeyNotFoundError,
    KeyResolutionError,
    MissingHeaderError,
    MissingTagError,
    ProverError,
    ProverIOError,
    SignatureDecodeError,
    UnsupportedAlgorithmError,
)
from dkim_prover.pipeline import build_prover_record, generate
from dkim_prover.record import ProverRecord, render_prover_toml, write_prover_toml

__version__ = '0.1.0'

__all__ = [
    "CapacityError",
    "ConfigError",
    "DnsLookupError",
    "EncodingError",
    "IndexingError",
    "KeyFormatError",
    "KeyNotFoundError",
    "KeyResolutionError",
    "MissingHeaderError",
    "MissingTagError",
    "ProverConfig",
    "ProverError",
    "ProverIOError",
    "ProverRecord",
    "SignatureDecodeError",
    "UnsupportedAlgorithmError",
    "build_prover_record",
    "generate",
    "load_config",
    "render_prover_toml",
    "write_prover_toml",
]
