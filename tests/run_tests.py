#!/usr/bin/env python3
"""Test runner script for the search scraper.

Runs the pytest suite by marker so the browser-free unit tests can be run
on their own.
"""

import argparse
import subprocess
import sys


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and return success status."""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print(f"{'='*60}\n")

    try:
        subprocess.run(cmd, check=True, capture_output=False)
        print(f"\n✅ {description} completed successfully")
        return True
    except subprocess.CalledProcessError as e:
        print(f"\n❌ {description} failed with exit code {e.returncode}")
        return False


def main():
    """Main test runner function."""
    parser = argparse.ArgumentParser(description="Run search scraper tests")
    parser.add_argument(
        "--type",
        choices=["unit", "integration", "all"],
        default="all",
        help="Type of tests to run (default: all)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument(
        "--keyword",
        "-k",
        help="Run only tests matching this expression (e.g., 'pagination')",
    )

    args = parser.parse_args()

    base_cmd = [sys.executable, "-m", "pytest", "tests/"]

    if args.verbose:
        base_cmd.append("-v")

    if args.keyword:
        base_cmd.extend(["-k", args.keyword])

    if args.type == "all":
        success = run_command(base_cmd, "All Tests")
    else:
        success = run_command(
            base_cmd + ["-m", args.type], f"{args.type.capitalize()} Tests"
        )

    if success:
        print(f"\n🎉 All {args.type} tests passed!")
        return 0
    print(f"\n💥 Some {args.type} tests failed!")
    return 1


if __name__ == "__main__":
    sys.exit(main())
