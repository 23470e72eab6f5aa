"""
End to end: raw email -> ProverRecord -> Prover TOML.
"""
import logging

from dkim_prover import dnskey, limbs, message
from dkim_prover.canonicalize import canonical_header
from dkim_prover.config import ProverConfig
from dkim_prover.fields import locate_fields
from dkim_prover.record import ProverRecord, write_prover_toml
from dkim_prover.tags import parse_dkim_tags

logger = logging.getLogger(__name__)


def build_prover_record(msg, config: ProverConfig = None, dnsfunc=None) -> ProverRecord:
    """ Compute every circuit input for one signed message.

    @param msg: email.message.Message
    @param config: ProverConfig, defaults when None
    @param dnsfunc: callable
        name -> DKIM TXT record text; the real DNS when None
    @return: ProverRecord
    @raise ProverError: any stage failed
    """
    if config is None:
        config = ProverConfig()

    header = canonical_header(msg, config.header_capacity)
    tags = parse_dkim_tags(message.header_value(msg, 'DKIM-Signature'))

    public_key = dnskey.resolve_public_key(
        tags.selector, tags.domain, dnsfunc=dnsfunc, bit_width=config.bit_width,
        timeout=config.dns_timeout, retries=config.dns_retries,
        nameservers=config.nameservers)

    bits, limb_bits = config.bit_width, config.limb_bits
    signature = limbs.signature_limbs(tags.signature, bits, limb_bits)
    modulus = limbs.modulus_limbs(public_key.n, bits, limb_bits)
    redc = limbs.redc_limbs(public_key.n, bits, limb_bits)
    logger.debug("%d limbs of %d bits per integer", len(modulus), limb_bits)

    layout = locate_fields(header, msg, email_capacity=config.email_capacity,
                           subject_capacity=config.subject_capacity,
                           strategy=config.address_strategy)

    return ProverRecord(
        header=header,
        signature=signature,
        modulus=modulus,
        redc=redc,
        sender=layout.sender,
        recipient=layout.recipient,
        subject=layout.subject,
        from_seq=layout.from_seq,
        member_seq=layout.member_seq,
        to_seq=layout.to_seq,
        relayer_seq=layout.relayer_seq,
    )


def generate(file, output=None, config: ProverConfig = None, dnsfunc=None):
    """ Read an .eml file and write its Prover TOML.

    @return: pathlib.Path of the written file
    """
    if config is None:
        config = ProverConfig()
    msg = message.load_message(file)
    record = build_prover_record(msg, config, dnsfunc=dnsfunc)
    return write_prover_toml(record, output or config.output)
