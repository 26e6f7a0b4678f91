import os
import sys
import logging
import argparse

# Required: Use uvloop for better performance
import uvloop

# Add the current directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from configuration import (
    DEFAULT_GATEWAY, DEFAULT_OUTPUT_DIR, DEFAULT_PLOTS_DIR, DEFAULT_SUMMARY_FILE,
    ARWEAVE_WALLET_FILE, SWEEP_SIZES, SWEEP_DELAY_SECONDS,
)
from common.errors import SizeFormatError
from common.sizes import parse_size

# Set up logging (only if not already configured)
if not logging.root.handlers:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Keep HTTP client chatter out of the benchmark log
for noisy in ('urllib3', 'requests', 'aiohttp', 'arweave'):
    logging.getLogger(noisy).setLevel(logging.WARNING)


class ArweaveBenchmarkCLI:
    """CLI interface for the Arweave gateway benchmark."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            prog='arweave-bench',
            description='Arweave gateway latency and throughput benchmark',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Upload 5MB, wait for the gateway, download and verify
  python cli.py latency jwk.json 5MB https://arweave.net

  # Read an existing transaction through the raw endpoint
  python cli.py read Ab1Rul2b5FJvjOwD11XW5BgVSTvNvtwSQqZqYjYzNwU

  # Run latency tests for several sizes, one after another
  python cli.py sweep jwk.json --sizes 10KB 10MB 20MB

  # Summarize and plot collected reports
  python cli.py summarize --results-dir results
  python cli.py plot --results-dir results --output-dir plots
            """
        )
        parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Latency command
        latency_parser = subparsers.add_parser('latency', help='Upload, wait for gateway, download and verify')
        latency_parser.add_argument('wallet', help='Path to the JWK key file')
        latency_parser.add_argument('size', help='Payload size, e.g. 512KB, 5MB, 1GB')
        latency_parser.add_argument('gateway', nargs='?', default=DEFAULT_GATEWAY,
                                    help=f'Gateway URL (default: {DEFAULT_GATEWAY})')
        latency_parser.add_argument('--output-dir', type=str, default=DEFAULT_OUTPUT_DIR,
                                    help=f'Directory for the JSON report (default: {DEFAULT_OUTPUT_DIR})')

        # Read command
        read_parser = subparsers.add_parser('read', help='Download and verify an existing transaction')
        read_parser.add_argument('txid', help='Transaction id')
        read_parser.add_argument('gateway', nargs='?', default=DEFAULT_GATEWAY,
                                 help=f'Gateway URL (default: {DEFAULT_GATEWAY})')
        read_parser.add_argument('--output-dir', type=str, default=DEFAULT_OUTPUT_DIR,
                                 help=f'Directory for the JSON report (default: {DEFAULT_OUTPUT_DIR})')

        # Sweep command
        sweep_parser = subparsers.add_parser('sweep', help='Run latency tests for several sizes sequentially')
        sweep_parser.add_argument('wallet', nargs='?', default=ARWEAVE_WALLET_FILE,
                                  help='Path to the JWK key file (default: $ARWEAVE_WALLET_FILE)')
        sweep_parser.add_argument('--sizes', nargs='+', default=SWEEP_SIZES,
                                  help=f'Payload sizes (default: {" ".join(SWEEP_SIZES)})')
        sweep_parser.add_argument('--gateway', type=str, default=DEFAULT_GATEWAY,
                                  help=f'Gateway URL (default: {DEFAULT_GATEWAY})')
        sweep_parser.add_argument('--delay', type=float, default=SWEEP_DELAY_SECONDS,
                                  help=f'Seconds to wait between tests (default: {SWEEP_DELAY_SECONDS:g})')
        sweep_parser.add_argument('--output-dir', type=str, default=DEFAULT_OUTPUT_DIR,
                                  help=f'Directory for the JSON reports (default: {DEFAULT_OUTPUT_DIR})')

        # Summarize command
        summarize_parser = subparsers.add_parser('summarize', help='Aggregate latency reports by size')
        summarize_parser.add_argument('--results-dir', type=str, default=DEFAULT_OUTPUT_DIR,
                                      help=f'Directory containing reports (default: {DEFAULT_OUTPUT_DIR})')
        summarize_parser.add_argument('--output', type=str, default=DEFAULT_SUMMARY_FILE,
                                      help=f'CSV file to write (default: {DEFAULT_SUMMARY_FILE})')

        # Plot command
        plot_parser = subparsers.add_parser('plot', help='Plot latency reports by size')
        plot_parser.add_argument('--results-dir', type=str, default=DEFAULT_OUTPUT_DIR,
                                 help=f'Directory containing reports (default: {DEFAULT_OUTPUT_DIR})')
        plot_parser.add_argument('--output-dir', type=str, default=DEFAULT_PLOTS_DIR,
                                 help=f'Output directory for generated plots (default: {DEFAULT_PLOTS_DIR})')

        return parser

    def _usage_error(self, subcommand: str, message: str) -> int:
        """Report a usage error on stderr; no network activity has happened yet."""
        print(f"Error: {message}", file=sys.stderr)
        print(f"Run '{self.parser.prog} {subcommand} --help' for usage.", file=sys.stderr)
        return 1

    async def run_latency(self, args):
        """Run the upload/availability/download latency test."""
        from runners.latency import LatencyTest

        logger.info("=== Arweave Latency Test ===")
        test = LatencyTest(
            args.wallet,
            args.size_bytes,
            args.size,
            gateway=args.gateway,
            output_dir=args.output_dir,
        )
        return await test.run()

    async def run_read(self, args):
        """Run the read test for an existing transaction."""
        from runners.read import ReadTest

        logger.info("=== Arweave Read Test ===")
        test = ReadTest(args.txid, gateway=args.gateway, output_dir=args.output_dir)
        return await test.run()

    async def run_sweep(self, args):
        """Run latency tests for each requested size."""
        from runners.sweep import SweepRunner

        runner = SweepRunner(
            args.wallet,
            sizes=args.sizes,
            gateway=args.gateway,
            output_dir=args.output_dir,
            delay_seconds=args.delay,
        )
        return await runner.run()

    def run_summarize(self, args):
        """Aggregate collected latency reports into a CSV table."""
        try:
            from persistence.summary import ResultsSummary

            summary = ResultsSummary(args.results_dir)
            output = summary.save_csv(args.output)
            if output is None:
                logger.error(f"No latency reports to summarize in {args.results_dir}")
                return 1

            for _, row in summary.by_size().iterrows():
                logger.info(
                    f"{row['size']:>8}: runs={int(row['runs'])} "
                    f"upload={row['upload_ms_mean']:,.0f} ms "
                    f"availability={row['availability_ms_mean']:,.0f} ms "
                    f"download={row['download_ms_mean']:,.0f} ms "
                    f"pass_rate={row['pass_rate']:.0%}"
                )
            return 0

        except Exception as e:
            logger.error(f"Error in summarize phase: {e}")
            return 1

    def run_plot(self, args):
        """Generate plots from collected latency reports."""
        try:
            from persistence.summary import ResultsSummary
            from visualizations.latency_plots import LatencyPlotter

            summary = ResultsSummary(args.results_dir)
            plots = LatencyPlotter(summary.data, args.output_dir).create_all_plots()

            if plots:
                logger.info(f"Successfully created {len(plots)} plots in {args.output_dir}")
                for plot in plots:
                    logger.info(f"  - {plot}")
                return 0
            else:
                logger.error("No plots were created")
                return 1

        except Exception as e:
            logger.error(f"Error in plot phase: {e}")
            return 1

    def run(self, args=None):
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        try:
            parsed_args = self.parser.parse_args(args)
        except SystemExit as e:
            # argparse exits 2 on usage errors; this tool reports them as 1
            return 0 if e.code in (0, None) else 1

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        if parsed_args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        try:
            if parsed_args.command == 'latency':
                try:
                    parsed_args.size_bytes = parse_size(parsed_args.size)
                except SizeFormatError as e:
                    return self._usage_error('latency', str(e))
                return uvloop.run(self.run_latency(parsed_args))
            elif parsed_args.command == 'read':
                return uvloop.run(self.run_read(parsed_args))
            elif parsed_args.command == 'sweep':
                if not parsed_args.wallet:
                    return self._usage_error('sweep', 'a wallet key file is required')
                return uvloop.run(self.run_sweep(parsed_args))
            elif parsed_args.command == 'summarize':
                return self.run_summarize(parsed_args)
            elif parsed_args.command == 'plot':
                return self.run_plot(parsed_args)
            else:
                logger.error(f"Unknown command: {parsed_args.command}")
                return 1

        except KeyboardInterrupt:
            logger.info("Operation interrupted by user")
            return 1
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
            return 1


def main():
    """Main entry point."""
    cli = ArweaveBenchmarkCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
