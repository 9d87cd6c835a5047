#!/usr/bin/env python3
"""
Command-line entry point for the suspicious approval detector.

This script orchestrates one run:
1. Parse command-line arguments
2. Build the chain-state oracle (JSON-RPC node or Etherscan)
3. Evaluate every requested transaction
4. Print findings as JSON
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dotenv import load_dotenv

from .clients import EtherscanChainOracle, Web3ChainOracle
from .core import ConfigurationError, OracleError, RiskEvaluator
from .core.findings import DEFAULT_PROTOCOL

# Load environment variables
load_dotenv(override=True)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Flag suspicious ERC-20 approvals in one or more transactions',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables (can also be set in .env file):
  RPC_URL                       JSON-RPC endpoint (preferred oracle)
  ETHERSCAN_API_KEY             Etherscan API key (used when RPC_URL is unset)
  CHAIN_ID                      Chain ID for Etherscan v2 (default: 1)
  ORACLE_TIMEOUT                Seconds allowed for one approval's lookups (default: 10)
  MAX_CONCURRENT_ORACLE_CALLS   Approvals queried at once (default: 8)
  FINDING_PROTOCOL              Protocol tag on findings (default: ethereum)

Priority: Command-line arguments > Environment variables > Defaults
        """
    )
    parser.add_argument(
        'tx_hashes',
        nargs='+',
        help='Transaction hashes to evaluate'
    )
    parser.add_argument(
        '--rpc-url',
        default=os.getenv('RPC_URL'),
        help='JSON-RPC endpoint (env: RPC_URL)'
    )
    parser.add_argument(
        '--api-key',
        default=os.getenv('ETHERSCAN_API_KEY'),
        help='Etherscan API key (env: ETHERSCAN_API_KEY)'
    )
    parser.add_argument(
        '--chain-id',
        type=int,
        default=int(os.getenv('CHAIN_ID') or '1'),
        help='Chain ID for Etherscan lookups (env: CHAIN_ID, default: 1)'
    )
    parser.add_argument(
        '--oracle-timeout',
        type=float,
        default=float(os.getenv('ORACLE_TIMEOUT') or '10'),
        help="Seconds allowed for one approval's oracle lookups (env: ORACLE_TIMEOUT, default: 10)"
    )
    parser.add_argument(
        '--max-concurrent',
        type=int,
        default=int(os.getenv('MAX_CONCURRENT_ORACLE_CALLS') or '8'),
        help='Approvals queried concurrently (env: MAX_CONCURRENT_ORACLE_CALLS, default: 8)'
    )
    parser.add_argument(
        '--protocol',
        default=os.getenv('FINDING_PROTOCOL') or DEFAULT_PROTOCOL,
        help=f'Protocol tag attached to findings (env: FINDING_PROTOCOL, default: {DEFAULT_PROTOCOL})'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        default=False,
        help='Enable debug mode to log to file (default: False)'
    )
    return parser


def configure_logging(debug: bool) -> None:
    if debug:
        # Create output directory for log file
        output_dir = Path("output")
        output_dir.mkdir(exist_ok=True)

        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(output_dir / 'approval_risk.log')
            ]
        )
    else:
        logging.basicConfig(
            level=logging.CRITICAL,
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=[
                logging.NullHandler()
            ]
        )


def build_oracle(args: argparse.Namespace):
    """Prefer a JSON-RPC node; fall back to Etherscan's proxy API."""
    if args.rpc_url:
        return Web3ChainOracle(rpc_url=args.rpc_url, timeout=args.oracle_timeout)
    if args.api_key:
        return EtherscanChainOracle(args.api_key, chain_id=args.chain_id, timeout=args.oracle_timeout)
    raise ConfigurationError("--rpc-url or --api-key is required (or set RPC_URL / ETHERSCAN_API_KEY)")


async def run(oracle, evaluator: RiskEvaluator, tx_hashes: Sequence[str]) -> Tuple[List[Dict[str, Any]], bool]:
    """
    Evaluate each transaction and collect JSON-ready results.

    Returns:
        (results, all_loaded) where all_loaded is False if any transaction could not be fetched
    """
    results = []
    all_loaded = True

    try:
        for tx_hash in tx_hashes:
            try:
                tx = await oracle.fetch_transaction_event(tx_hash)
            except (OracleError, ConfigurationError) as e:
                logger.error(f"Could not load {tx_hash}: {e}")
                print(f"Error: could not load {tx_hash}: {e}", file=sys.stderr)
                all_loaded = False
                continue

            report = await evaluator.assess_transaction(tx)
            results.append({
                'txHash': report.tx_hash,
                'findings': [finding.to_alert() for finding in report.findings],
                'failures': [failure.model_dump() for failure in report.failures],
            })
    finally:
        await oracle.close()

    return results, all_loaded


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.debug)

    try:
        oracle = build_oracle(args)
        evaluator = RiskEvaluator(
            oracle,
            oracle_timeout=args.oracle_timeout,
            max_concurrent=args.max_concurrent,
            protocol=args.protocol,
        )
    except (ConfigurationError, ValueError) as e:
        parser.error(str(e))

    results, all_loaded = asyncio.run(run(oracle, evaluator, args.tx_hashes))

    print(json.dumps(results, indent=2))
    return 0 if all_loaded else 1


if __name__ == "__main__":
    sys.exit(main())
