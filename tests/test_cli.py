import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
SRC_DIR = TESTS_DIR.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tvcatalog.cli import run
from tvcatalog.config_manager import DEFAULT_SOURCE_URL, get_default_config


class CliTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        config = get_default_config()
        for entry in config["output_directories"].values():
            if isinstance(entry, dict):
                entry["directory"] = self._tmp.name
        self.config_path = os.path.join(self._tmp.name, "config.json")
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(config, f)

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = run(["--config", self.config_path, *argv])
        return code, out.getvalue()

    def test_sources_add_and_list(self):
        code, _ = self._run("sources", "add", "http://extra/list.m3u")
        self.assertEqual(code, 0)
        code, out = self._run("sources", "list")
        self.assertEqual(out.splitlines(), [DEFAULT_SOURCE_URL, "http://extra/list.m3u"])

    def test_sources_add_requires_url(self):
        code, out = self._run("sources", "add")
        self.assertEqual(code, 2)
        self.assertIn("A URL is required", out)

    def test_clear_cache(self):
        code, out = self._run("clear-cache")
        self.assertEqual(code, 0)
        self.assertIn("Cache cleared", out)


if __name__ == "__main__":
    unittest.main()
