"""Wellcast v1.0 — Standalone test runner (no pytest dependency)."""
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).parent
sys.path.insert(0, str(ROOT))


class _TickResult(unittest.TextTestResult):
    """Prints one ✓/✗ line per test, grouped by module."""

    def startTest(self, test):
        module = type(test).__module__
        if module != getattr(self, "_current_module", None):
            self._current_module = module
            self.stream.write(f"\n[{module}]\n")
        super().startTest(test)

    def addSuccess(self, test):
        super().addSuccess(test)
        self.stream.write(f"  ✓ {test._testMethodName}\n")

    def addFailure(self, test, err):
        super().addFailure(test, err)
        self.stream.write(f"  ✗ {test._testMethodName}\n")

    def addError(self, test, err):
        super().addError(test, err)
        self.stream.write(f"  ✗ {test._testMethodName} (error)\n")


if __name__ == "__main__":
    suite = unittest.defaultTestLoader.discover(str(ROOT / "tests"))
    runner = unittest.TextTestRunner(resultclass=_TickResult, verbosity=0, stream=sys.stdout)
    result = runner.run(suite)

    failed = len(result.failures) + len(result.errors)
    passed = result.testsRun - failed - len(result.skipped)

    print(f"\n{'=' * 58}")
    print(f"  {passed} passed, {failed} failed")
    print(f"{'=' * 58}")
    sys.exit(1 if failed else 0)
