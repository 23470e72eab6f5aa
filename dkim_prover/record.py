"""
The prover record and its TOML rendering.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from dkim_prover.errors import ProverIOError
from dkim_prover.types import FieldOffset, PaddedField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProverRecord:
    header: PaddedField
    signature: List[str]
    modulus: List[str]
    redc: List[str]
    sender: PaddedField
    recipient: PaddedField
    subject: PaddedField
    from_seq: FieldOffset
    member_seq: FieldOffset
    to_seq: FieldOffset
    relayer_seq: FieldOffset


def byte_array(buffer: bytes) -> str:
    return '[%s]' % ', '.join(str(b) for b in buffer)


def quote_hex(limbs) -> str:
    return '[%s]' % ', '.join('"%s"' % limb for limb in limbs)


def _storage(name, field: PaddedField):
    return "[%s]\nlen = %d\nstorage = %s" % (name, field.length, byte_array(field.buffer))


def _seq(name, offset: FieldOffset):
    return "[%s]\nindex = %d\nlength = %d" % (name, offset.index, offset.length)


def render_prover_toml(record: ProverRecord) -> str:
    """ Render the record as Prover TOML.

    Top level keys come first, TOML does not allow them after a table.
    """
    sections = [
        "signature = %s" % quote_hex(record.signature),
        "msg_hash = %s" % byte_array(record.subject.buffer),
        _storage('header', record.header),
        _storage('member', record.sender),
        _seq('from_seq', record.from_seq),
        _seq('member_seq', record.member_seq),
        _storage('relayer', record.recipient),
        _seq('to_seq', record.to_seq),
        _seq('relayer_seq', record.relayer_seq),
        "[pubkey]\nmodulus = %s\nredc = %s" % (quote_hex(record.modulus), quote_hex(record.redc)),
    ]
    return '\n\n'.join(sections) + '\n'


def write_prover_toml(record: ProverRecord, path) -> Path:
    path = Path(path)
    try:
        path.write_text(render_prover_toml(record), encoding='ascii')
    except OSError as e:
        raise ProverIOError("failed to write %s: %s" % (path, e)) from e
    logger.info("prover record written to %s", path)
    return path
