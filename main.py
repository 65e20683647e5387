"""
Stylus Program Activator - Main Entry Point
Estimates a program's activation data fee and sends one activation transaction
"""

import argparse
import os
import sys
from typing import List, Optional
from loguru import logger
from dotenv import load_dotenv

from activator import __version__, ActivationRequest, activate_program
from utils.errors import ActivationError, ArgumentError

STDERR_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"

VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


class ActivatorArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ArgumentError instead of exiting"""

    def error(self, message):
        raise ArgumentError(message)


def build_parser() -> ActivatorArgumentParser:
    """Build the command-line parser"""
    parser = ActivatorArgumentParser(
        prog='activate-stylus-program',
        description='Activate a deployed Stylus program by paying its estimated activation data fee'
    )
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--private-key', required=True, help='Hex private key of the sending account')
    parser.add_argument('--endpoint', required=True, help='Node RPC endpoint URL')
    parser.add_argument('--address', required=True, help='Address of the program to activate')
    parser.add_argument(
        '--bump-fee-percent',
        type=int,
        default=0,
        help='Percentage added to the estimated data fee (default: 0)'
    )
    parser.add_argument(
        '--no-wait',
        action='store_true',
        help='Return once the node accepts the transaction instead of waiting for the receipt'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Log progress to stderr (-vv for debug output)'
    )
    parser.add_argument(
        '--log-file',
        default=os.getenv('ACTIVATOR_LOG_FILE'),
        help='Also write debug logs to this file'
    )
    return parser


def configure_logging(verbosity: int = 0, log_file: Optional[str] = None):
    """
    Configure loguru sinks

    Args:
        verbosity: Number of -v flags
        log_file: Optional path for a debug log file
    """
    if verbosity:
        level = VERBOSITY_LEVELS.get(verbosity, "DEBUG")
    else:
        level = os.getenv('ACTIVATOR_LOG_LEVEL', 'WARNING').upper()

    try:
        logger.level(level)
    except ValueError as e:
        raise ArgumentError(f"invalid log level: {e}") from e

    logger.remove()
    logger.add(sys.stderr, format=STDERR_FORMAT, level=level)

    if log_file:
        try:
            logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
        except (ValueError, OSError) as e:
            raise ArgumentError(f"cannot open log file {log_file}: {e}") from e


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run one activation

    Args:
        argv: Arguments without the program name (None = sys.argv)

    Returns:
        Process exit code
    """
    load_dotenv()

    try:
        args = build_parser().parse_args(argv)
        configure_logging(args.verbose, args.log_file)

        request = ActivationRequest.from_args(args.address, args.bump_fee_percent)
        result = activate_program(
            args.endpoint,
            args.private_key,
            request,
            wait_for_receipt=not args.no_wait
        )
    except ActivationError as e:
        print(f"error: {e.kind}: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("error: interrupted", file=sys.stderr)
        return 130

    print(result.tx_hash)
    return 0


def run():
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()
