import os
import sys
import logging
import argparse
import asyncio

# Required: Use uvloop for better performance
import uvloop
asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())

# Add the current directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from configuration import (
    DEFAULT_ITERATIONS, DEFAULT_WARM_UP, MAX_IDLE_CONNECTIONS, REQUEST_TIMEOUT_SECONDS,
    ACCEPT_ENCODING, TCP_RTT_PORT, TCP_RTT_DEFAULT_ITERATIONS, LOG_LEVEL, LOG_FORMAT
)
from common.errors import TraceBenchError

# Set up logging (only if not already configured)
if not logging.root.handlers:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


class TraceBenchCLI:
    """CLI interface for HTTP trace and TCP RTT measurements."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description='HTTP latency trace benchmark CLI',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Trace 100 requests and report TTFB/TTLB percentiles
  python cli.py trace --url https://example.com/ --iterations 100

  # Prime the connection pool first so every timed trial reuses it
  python cli.py trace --url https://example.com/ --iterations 50 --warm-up

  # Time bare TCP connects to port 80 of the host
  python cli.py rtt --url https://example.com/ --iterations 10
            """
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Trace command
        trace_parser = subparsers.add_parser('trace', help='Traced HTTP requests')
        trace_parser.add_argument('--url', type=str, required=True,
                                  help='URL to performance profile')
        trace_parser.add_argument('--iterations', type=int, default=DEFAULT_ITERATIONS,
                                  help=f'Number of requests to send (default: {DEFAULT_ITERATIONS})')
        trace_parser.add_argument('--warm-up', action='store_true', default=DEFAULT_WARM_UP,
                                  help='Send one untimed request before the trials')
        trace_parser.add_argument('--timeout', type=float, default=REQUEST_TIMEOUT_SECONDS,
                                  help=f'Request timeout in seconds, 0 = unbounded (default: {REQUEST_TIMEOUT_SECONDS})')
        trace_parser.add_argument('--max-idle-connections', type=int, default=MAX_IDLE_CONNECTIONS,
                                  help=f'Pooled connections per host (default: {MAX_IDLE_CONNECTIONS})')
        trace_parser.add_argument('--accept-encoding', type=str, default=ACCEPT_ENCODING,
                                  help=f'Accept-Encoding sent with every request (default: {ACCEPT_ENCODING})')

        # RTT command
        rtt_parser = subparsers.add_parser('rtt', help='TCP connect round-trip time')
        rtt_parser.add_argument('--url', type=str, required=True,
                                help='URL whose host is probed')
        rtt_parser.add_argument('--iterations', type=int, default=TCP_RTT_DEFAULT_ITERATIONS,
                                help=f'Number of connections (default: {TCP_RTT_DEFAULT_ITERATIONS})')
        rtt_parser.add_argument('--port', type=int, default=TCP_RTT_PORT,
                                help=f'TCP port (default: {TCP_RTT_PORT})')
        rtt_parser.add_argument('--timeout', type=float, default=0,
                                help='Connect timeout in seconds, 0 = unbounded (default: 0)')

        return parser

    async def run_trace(self, args):
        """Run the HTTP trace benchmark."""
        try:
            from algorithms.trial_runner import TrialConfig
            from runners.trace_runner import TraceRunner

            logger.info("=== HTTP Trace ===")
            logger.info(args.url)

            runner = TraceRunner(
                TrialConfig(url=args.url, iterations=args.iterations, warm_up=args.warm_up),
                max_idle_connections=args.max_idle_connections,
                timeout_seconds=args.timeout,
                accept_encoding=args.accept_encoding,
            )
            results = await runner.run_benchmark()

            print(results["report"])
            return 0

        except TraceBenchError as e:
            logger.error(f"Trace run aborted: {e}")
            return 1
        except ValueError as e:
            logger.error(f"Invalid trace configuration: {e}")
            return 1

    async def run_rtt(self, args):
        """Run the TCP RTT probe."""
        try:
            from runners.rtt_runner import RttRunner

            logger.info("=== TCP RTT ===")

            runner = RttRunner(args.url, args.iterations, args.port, args.timeout)
            results = await runner.run_benchmark()

            print(results["report"])
            return 0

        except TraceBenchError as e:
            logger.error(f"RTT run aborted: {e}")
            return 1
        except ValueError as e:
            logger.error(f"Invalid RTT configuration: {e}")
            return 1

    def run(self, args=None):
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            if parsed_args.command == 'trace':
                return asyncio.run(self.run_trace(parsed_args))
            elif parsed_args.command == 'rtt':
                return asyncio.run(self.run_rtt(parsed_args))
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
    cli = TraceBenchCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
