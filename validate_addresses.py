"""Address Validation Runner.

Validates Victorian addresses from the command line or a file, using the same
pipeline as the HTTP service (geocoder first, regex fallback second).

Usage:
    python validate_addresses.py "90 forman rd shelbourne 3515"
    python validate_addresses.py --file addresses.txt               # One per line
    python validate_addresses.py --file addresses.csv               # "address" column
    python validate_addresses.py --file addresses.json --format=json
    python validate_addresses.py --offline "123 Main Street, Melbourne VIC 3000"
"""

import argparse
import asyncio
import csv
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# Add project root to path
sys.path.insert(0, ".")

import httpx

from vicaddr.config import Config
from vicaddr.address_pipeline import AddressValidationOrchestrator, BatchProcessor
from vicaddr.geocode_client import DisabledGeocodeClient, NominatimClient


def load_file(file_path: str) -> list[str]:
    """Load addresses from a text, JSON or CSV file.

    JSON may be a list of strings, a list of objects with an "address" key,
    or an object with an "addresses" list.
    """
    path = Path(file_path)

    if not path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    suffix = path.suffix.lower()

    if suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("addresses", [])
        return [entry.get("address", "") if isinstance(entry, dict) else str(entry) for entry in data]

    elif suffix == ".csv":
        with open(path, "r", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            return [row.get("address", "") for row in reader]

    else:
        with open(path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]


def print_result(index: int, address: str, result: dict) -> None:
    status = "VALID" if result["isValid"] else "INVALID"
    print(f"\n[{index:3d}] Input: {address}")
    print(f"      {status} ({result['confidence']}) via {result['source']}")
    print(f"      {result['message']}")
    if result["formatted"]:
        print(f"      Formatted: {result['formatted']}")
    for suggestion in result["suggestions"][1:]:
        print(f"      Also: {suggestion['formatted']}")


async def run(addresses: list[str], offline: bool, delay: float | None, output_format: str) -> int:
    """Validate the addresses and print the results.

    Returns:
        Process exit code: 0 when every address is valid, 1 otherwise.
    """
    config = Config()

    async with httpx.AsyncClient(timeout=config.geocoder_timeout) as http_client:
        if offline or not config.geocoder_enabled:
            geocoder = DisabledGeocodeClient()
        else:
            geocoder = NominatimClient(**config.get_geocoder_config(), http_client=http_client)

        processor = BatchProcessor(
            AddressValidationOrchestrator(geocoder=geocoder, max_suggestions=config.max_suggestions),
            delay_seconds=0 if offline else config.batch_delay_seconds,
        )

        if output_format == "presentation":
            print("=" * 80)
            print("VICTORIA ADDRESS VALIDATION")
            print(f"Validating {len(addresses)} addresses ({'offline' if offline else 'geocoder + fallback'})")
            print("=" * 80)

        results, summary = await processor.process_list(addresses, delay_seconds=delay)

    if output_format == "json":
        print(json.dumps({
            "results": [r.to_dict() for r in results],
            "summary": summary.to_dict(),
        }, indent=2))
    else:
        for i, (address, result) in enumerate(zip(addresses, results), start=1):
            print_result(i, address, result.to_dict())

        print("")
        print("-" * 80)
        print(f"Valid: {summary.valid}/{summary.total} ({summary.valid_rate:.0%})")
        print(f"Unmapped: {summary.unmapped}")
        print(f"By source: {', '.join(f'{k}={v}' for k, v in summary.by_source.items())}")
        print(f"Total processing time: {summary.total_time_ms} ms")

    return 0 if summary.invalid == 0 else 1


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Validate Victorian addresses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python validate_addresses.py "90 forman rd shelbourne 3515"
  python validate_addresses.py --file addresses.txt
  python validate_addresses.py --file addresses.json --format=json
  python validate_addresses.py --offline "123 Main Street, Melbourne VIC 3000"
        """,
    )

    parser.add_argument(
        "addresses",
        nargs="*",
        help="Addresses to validate",
    )

    parser.add_argument(
        "--file",
        help="Read addresses from a text (one per line), JSON or CSV file",
    )

    parser.add_argument(
        "--format",
        "-f",
        choices=["presentation", "json"],
        default="presentation",
        help="Output format. Default: presentation",
    )

    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the geocoder and use the regex fallback only",
    )

    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds between geocoder calls (default from configuration)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    addresses = list(args.addresses)
    if args.file:
        addresses.extend(load_file(args.file))

    if not addresses:
        parser.error("no addresses given")

    sys.exit(asyncio.run(run(addresses, args.offline, args.delay, args.format)))


if __name__ == "__main__":
    main()
