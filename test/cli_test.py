"""
Basic tests for the command line interface.
"""

import unittest
import sys
import os
from unittest.mock import patch

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cli import TraceBenchCLI
from common.errors import DispatchError
from configuration import DEFAULT_ITERATIONS, TCP_RTT_PORT


class TestTraceBenchCLI(unittest.TestCase):
    """Test argument parsing and exit codes."""

    def setUp(self):
        self.cli = TraceBenchCLI()

    def test_trace_defaults(self):
        args = self.cli.parser.parse_args(['trace', '--url', 'https://example.com/'])
        self.assertEqual(args.command, 'trace')
        self.assertEqual(args.iterations, DEFAULT_ITERATIONS)
        self.assertFalse(args.warm_up)

    def test_trace_options(self):
        args = self.cli.parser.parse_args([
            'trace', '--url', 'https://example.com/', '--iterations', '5', '--warm-up',
            '--timeout', '3', '--max-idle-connections', '2', '--accept-encoding', 'br',
        ])
        self.assertEqual(args.iterations, 5)
        self.assertTrue(args.warm_up)
        self.assertEqual(args.timeout, 3.0)
        self.assertEqual(args.max_idle_connections, 2)
        self.assertEqual(args.accept_encoding, 'br')

    def test_rtt_defaults(self):
        args = self.cli.parser.parse_args(['rtt', '--url', 'https://example.com/'])
        self.assertEqual(args.port, TCP_RTT_PORT)

    def test_no_command(self):
        with patch('sys.stdout'):
            self.assertEqual(self.cli.run([]), 1)

    def test_invalid_iterations(self):
        self.assertEqual(self.cli.run(['trace', '--url', 'http://127.0.0.1/', '--iterations', '0']), 1)

    def test_trace_error_exit_code(self):
        async def failing_run(runner_self):
            raise DispatchError('http://127.0.0.1/', ConnectionRefusedError('refused'))

        with patch('runners.trace_runner.TraceRunner.run_benchmark', failing_run):
            code = self.cli.run(['trace', '--url', 'http://127.0.0.1/', '--iterations', '2'])
        self.assertEqual(code, 1)

    def test_trace_prints_report(self):
        async def fake_run(runner_self):
            return {"report": "Statistics:"}

        with patch('runners.trace_runner.TraceRunner.run_benchmark', fake_run), \
             patch('builtins.print') as mock_print:
            code = self.cli.run(['trace', '--url', 'http://127.0.0.1/', '--iterations', '2'])
        self.assertEqual(code, 0)
        mock_print.assert_called_once_with("Statistics:")


if __name__ == '__main__':
    unittest.main()
