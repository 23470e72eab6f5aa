"""
dkim-prover: turn a DKIM signed .eml file into Prover TOML for the circuit.
"""
import argparse
import logging

from dkim_prover.config import load_config
from dkim_prover.errors import ProverError
from dkim_prover.pipeline import generate
from dkim_prover.types import AddressStrategy

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='dkim-prover',
        description='Prepares the DKIM circuit inputs (Prover TOML) for a signed email')
    parser.add_argument('eml', help='Signed email in RFC 5322 format')
    parser.add_argument('-o', '--output', help='Output file (default Prover_email.toml)')
    parser.add_argument('-c', '--config', help='TOML config file')
    parser.add_argument('--profile', choices=['default', 'compact'],
                        help='compact uses 32 byte addresses taken verbatim from From/To')
    parser.add_argument('--header-capacity', type=int, help='Canonical header buffer size')
    parser.add_argument('--email-capacity', type=int, help='Sender/recipient buffer size')
    parser.add_argument('--subject-capacity', type=int, help='Subject buffer size')
    parser.add_argument('--address-strategy', choices=[s.value for s in AddressStrategy],
                        help='How the address is taken from the From/To value')
    parser.add_argument('--dns-timeout', type=float, help='Seconds per DNS attempt')
    parser.add_argument('--dns-retries', type=int, help='Extra DNS attempts after a timeout')
    parser.add_argument('--nameserver', action='append', dest='nameservers',
                        help='DNS server to query. Multiple servers are allowed')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='More logging (-vv for debug)')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    try:
        config = load_config(
            args.config, profile=args.profile,
            header_capacity=args.header_capacity,
            email_capacity=args.email_capacity,
            subject_capacity=args.subject_capacity,
            address_strategy=args.address_strategy,
            dns_timeout=args.dns_timeout,
            dns_retries=args.dns_retries,
            nameservers=args.nameservers,
            output=args.output,
        )
        path = generate(args.eml, config.output, config)
    except ProverError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return e.exit_code
    print(path)
    return 0

