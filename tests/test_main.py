import io
import shutil
from contextlib import redirect_stdout, redirect_stderr
from pathlib import Path
from unittest import TestCase

from primegen import debug
from primegen.__main__ import main, build_parser, resolved_Path
from primegen._utilities import random_unique_filename


class Test_Main(TestCase):

    def setUp(self):

        self.test_dir = random_unique_filename(Path.home())
        self.test_dir.mkdir(exist_ok = False)
        self.test_dir = self.test_dir.resolve()

    def tearDown(self):

        debug.set_dir(None)

        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def main(self, *argv):

        out = io.StringIO()
        err = io.StringIO()

        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))

        return code, out.getvalue(), err.getvalue()

    def test_build_parser(self):

        args = build_parser().parse_args(["run", "-d", str(self.test_dir)])
        self.assertEqual(args.command, "run")
        self.assertEqual(args.dir, self.test_dir)
        self.assertEqual(args.capacity, 10000)
        self.assertIsNone(args.max_cached)
        self.assertFalse(args.no_journal)
        self.assertEqual(resolved_Path("a"), Path.cwd() / "a")

        with redirect_stderr(io.StringIO()):

            with self.assertRaises(SystemExit):
                build_parser().parse_args([])

    def test_run_until_memory_full(self):

        code, out, err = self.main("run", "-d", str(self.test_dir), "-c", "5", "-m", "7")
        self.assertEqual(code, 1)
        self.assertIn("Press Ctrl+C to stop.", out)
        self.assertIn("1. Wrote primes #1 to #5 to file at", out)
        self.assertIn("UnsupportedOperationError", err)
        report = self.test_dir / "GeneratorFailureLog.txt"
        self.assertTrue(report.is_file())
        text = report.read_text(encoding = "utf-8")
        self.assertIn("Error: UnsupportedOperationError", text)
        self.assertIn("Current number to check: 20", text)
        self.assertIn("Stack Trace:", text)

        code, out, err = self.main("status", "-d", str(self.test_dir), "-c", "5")
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[0].split(), ["1", "5", "complete", "PrimeNumbers1.txt"])
        self.assertEqual(lines[1].split(), ["2", "3", "partial", "PrimeNumbers2.txt"])
        self.assertEqual(lines[2], "8 primes in 2 result files.")

        code, out, err = self.main("history", "-d", str(self.test_dir))
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[0].startswith("1. Wrote primes #1 to #5 to file at"))
        self.assertTrue(lines[1].startswith("2. Wrote primes #6 to #7 to file at"))
        self.assertTrue(lines[2].startswith("2. Wrote primes #8 to #8 to file at"))

    def test_run_no_journal(self):

        log_dir = self.test_dir / "logs"
        code, out, err = self.main(
            "run", "-d", str(self.test_dir), "-c", "5", "-m", "7", "--no-journal", "-l", str(log_dir), "-v"
        )
        self.assertEqual(code, 1)
        self.assertFalse((self.test_dir / "PrimeNumbers.journal").exists())
        self.assertIn("loading -> memory generation", out)
        self.assertTrue(debug.log_file().is_file())
        self.assertEqual(debug.log_file().parent.parent, log_dir)
        self.assertIn("Generating prime numbers...", debug.log_file().read_text())

        code, out, err = self.main("history", "-d", str(self.test_dir))
        self.assertEqual(code, 1)
        self.assertIn("No checkpoint journal", err)

    def test_status_empty(self):

        code, out, err = self.main("status", "-d", str(self.test_dir))
        self.assertEqual(code, 0)
        self.assertIn("No result files", out)

    def test_missing_directory(self):

        with self.assertRaises(FileNotFoundError):
            self.main("status", "-d", str(self.test_dir / "nope"))

        (self.test_dir / "file").touch()

        with self.assertRaises(NotADirectoryError):
            self.main("run", "-d", str(self.test_dir / "file"))
