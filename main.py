#!/usr/bin/env python3
"""
dostrans - DOS program translator

Disassembles a 16-bit real-mode DOS program and translates it, one
instruction at a time, into Go (or Python) source code that runs against an
emulated DOS environment.
"""

import argparse
import sys
from pathlib import Path

from dostrans.__version__ import __version__
from dostrans.config import BACKENDS, TARGETS, TranslatorConfig
from dostrans.error_handling import DosTransError, ErrorContext, ErrorHandler, InputError
from dostrans.input_handler import InputHandler
from dostrans.translator import InstructionTranslator


DEFAULT_INPUT = "life.com"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dostrans",
        description="Translate a 16-bit DOS program into emulator-backed Go or Python source",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  Translate a .com file to Go (needs ndisasm from nasm):
    dostrans life.com > life.go

  Use the built-in Capstone disassembler instead:
    dostrans life.com --backend capstone

  Translate an existing listing (ndisasm output with addresses cut off):
    ndisasm -b 16 life.com | cut -b29- | dostrans - --listing

  Emit Python instead of Go:
    dostrans life.com --target python -o life.py
        """
    )
    parser.add_argument(
        "file",
        nargs="?",
        default=DEFAULT_INPUT,
        help=f"Program to translate (default: {DEFAULT_INPUT}); '-' reads a listing from stdin"
    )
    parser.add_argument(
        "--target",
        choices=TARGETS,
        default="go",
        help="Output language (default: go)"
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default="ndisasm",
        help="Disassembler for binary input (default: ndisasm)"
    )
    parser.add_argument(
        "--ndisasm",
        default="ndisasm",
        metavar="PATH",
        help="ndisasm executable (default: ndisasm)"
    )
    parser.add_argument(
        "--listing",
        action="store_true",
        help="Input is already a disassembly listing, skip the disassembler"
    )
    parser.add_argument(
        "--minimal",
        action="store_true",
        help="Do not treat a, b, c, d, es, cs, di, ds as already declared"
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the translation to a file instead of stdout"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging and tracebacks"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    return parser


def main(argv=None) -> int:
    """Main entry point for the dostrans CLI"""
    args = build_parser().parse_args(argv)
    handler = ErrorHandler(debug_mode=args.debug)

    try:
        config = TranslatorConfig(
            target=args.target,
            backend=args.backend,
            preseed_registers=not args.minimal,
            ndisasm_path=args.ndisasm,
        ).validate()

        listing = args.listing or args.file == "-"
        listing_text = InputHandler(config).read(args.file, listing=listing)

        translator = InstructionTranslator(config)
        output = translator.translate(listing_text)

        if args.output:
            try:
                args.output.write_text(output)
            except OSError as e:
                raise InputError(f"Cannot write output file: {args.output}", original_exception=e,
                                 context=ErrorContext(file=str(args.output))) from e
            handler.log_info(f"Translated: {args.file} -> {args.output}")
        else:
            sys.stdout.write(output)
    except DosTransError as e:
        handler.handle_error(e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
