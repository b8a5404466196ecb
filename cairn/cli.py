import argparse
import json
import os
import sys
import time

from .exceptions import CairnError
from .loader.pipeline import load_config_sync
from .resolver.filesystem import FileSystemResolver
from .utils import TerminalColors, setup_logging


def main(argv=None):
    start_time = time.perf_counter()

    parser = argparse.ArgumentParser(description="Load a .cairn file and its imports into a .json value.")
    parser.add_argument("input_file", nargs="?", default=None, help="The path to the entry document.")
    parser.add_argument(
        "-o",
        "--output",
        dest="output_file",
        help="The path to the output .json file. Omit to write to stdout.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every fetch and import resolution.")
    parser.add_argument("--lsp", action="store_true", help="Start the language server on stdio.")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.lsp:
        from .server import start_server

        start_server()
        return

    if not args.input_file:
        parser.error("input_file is required unless --lsp is given.")

    entry_path = os.path.abspath(args.input_file)
    print(f"--- Loading {args.input_file} ---", file=sys.stderr)

    try:
        resolver = FileSystemResolver(root=os.path.dirname(entry_path))
        value = load_config_sync(resolver, entry_path)

        if args.output_file:
            output_file_path = os.path.abspath(args.output_file)
            os.makedirs(os.path.dirname(output_file_path), exist_ok=True)
            with open(output_file_path, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2)
            print(f"{TerminalColors.GREEN}--- Load Successful ---{TerminalColors.RESET}", file=sys.stderr)
            print(f"Value written to {output_file_path}", file=sys.stderr)
        else:
            json.dump(value, sys.stdout, indent=2)
            sys.stdout.write("\n")

    # --- Error Handling ---
    except CairnError as e:
        print(f"\n{TerminalColors.RED}--- LOAD ERROR ---\n{e}{TerminalColors.RESET}", file=sys.stderr)
        sys.exit(1)
    finally:
        duration = time.perf_counter() - start_time
        print(f"{TerminalColors.CYAN}--- Total Execution Time: {duration:.4f} seconds ---{TerminalColors.RESET}", file=sys.stderr)


if __name__ == "__main__":
    main()
