"""
Prover configuration.

Loads config from:
  1. Defaults
  2. A TOML file (``[prover]`` table, or top level keys)
  3. Environment variables (DKIM_PROVER_<KEY>, e.g. DKIM_PROVER_EMAIL_CAPACITY)
  4. Explicit overrides (CLI flags)

The two historical deployments differ only here: the older one used a
32 byte email buffer and the verbatim From/To value, the current one a 124
byte buffer and the last address found in the value.
"""
import copy
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from dkim_prover.errors import ConfigError
from dkim_prover.types import AddressStrategy

ENV_PREFIX = 'DKIM_PROVER_'

DEFAULT_CONFIG = {
    "header_capacity": 1024,
    "subject_capacity": 44,  # base64 encoded sha256 digest
    "email_capacity": 124,
    "bit_width": 2048,
    "limb_bits": 120,
    "address_strategy": "last_match",
    "output": "Prover_email.toml",
    "dns_timeout": 5.0,
    "dns_retries": 2,
    "nameservers": [],
}

# capacities for the deployment that used 32 byte addresses
COMPACT_PROFILE = {
    "email_capacity": 32,
    "address_strategy": "verbatim",
}


@dataclass(frozen=True)
class ProverConfig:
    header_capacity: int = 1024
    subject_capacity: int = 44
    email_capacity: int = 124
    bit_width: int = 2048
    limb_bits: int = 120
    address_strategy: AddressStrategy = AddressStrategy.last_match
    output: str = "Prover_email.toml"
    dns_timeout: float = 5.0
    dns_retries: int = 2
    nameservers: tuple = ()

    def __post_init__(self):
        for name in ('header_capacity', 'subject_capacity', 'email_capacity',
                     'bit_width', 'limb_bits'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigError("%s must be a positive integer (%r)" % (name, value))
        if self.dns_retries < 0:
            raise ConfigError("dns_retries must not be negative (%r)" % self.dns_retries)
        if self.dns_timeout <= 0:
            raise ConfigError("dns_timeout must be positive (%r)" % self.dns_timeout)


def _coerce(key, value):
    """Convert a raw config value (from TOML or the environment) to its field type."""
    default = DEFAULT_CONFIG[key]
    try:
        if key == 'address_strategy':
            return AddressStrategy(value)
        if key == 'nameservers':
            if isinstance(value, str):
                value = [v for v in value.replace(',', ' ').split() if v]
            return tuple(str(v) for v in value)
        if isinstance(default, int):
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(value)
            return int(value)
        if isinstance(default, float):
            return float(value)
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigError("invalid value for %s: %r" % (key, value)) from e


def _read_file(path):
    try:
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError("cannot read config file %s: %s" % (path, e)) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError("invalid config file %s: %s" % (path, e)) from e
    return data.get('prover', data)


def _from_environ(environ):
    values = {}
    for key in DEFAULT_CONFIG:
        env_key = ENV_PREFIX + key.upper()
        if env_key in environ:
            values[key] = environ[env_key]
    return values


def load_config(path: Optional[Path] = None, environ=None, profile: Optional[str] = None,
                **overrides) -> ProverConfig:
    """ Build a ProverConfig from defaults, file, environment and overrides.

    @param path: optional TOML config file
    @param environ: mapping used instead of os.environ
    @param profile: "compact" selects the 32 byte email deployment
    @param overrides: final values, None values are ignored
    @return: ProverConfig
    @raise ConfigError: unknown key or invalid value
    """
    raw = copy.deepcopy(DEFAULT_CONFIG)
    if profile == 'compact':
        raw.update(COMPACT_PROFILE)
    elif profile not in (None, 'default'):
        raise ConfigError("unknown profile: %s" % profile)

    layers = []
    if path is not None:
        layers.append(_read_file(path))
    layers.append(_from_environ(os.environ if environ is None else environ))
    layers.append({k: v for k, v in overrides.items() if v is not None})

    for layer in layers:
        for key, value in layer.items():
            if key not in DEFAULT_CONFIG:
                raise ConfigError("unknown config key: %s" % key)
            raw[key] = value

    known = {f.name for f in fields(ProverConfig)}
    return ProverConfig(**{k: _coerce(k, v) for k, v in raw.items() if k in known})
