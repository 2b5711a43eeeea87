"""Tests for the build CLI command."""

import json
import sys
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QueryKit.cli import cli
from QueryKit.utils.log import log


_CONFIG_TEMPLATE = """
log:
  level: INFO

output:
  base_dir: {base_dir}
  formats: [console, json]

queries:
  - name: active_users
    type: relational
    select: [id, email]
    from: users
    where:
      - {{field: status, value: active}}
    limit: 10

  - name: everything
    type: search
    index: logs
    size: 5000
"""


class TestBuildCommand(unittest.TestCase):
    def tearDown(self) -> None:
        for handler in log.handlers:
            handler.close()
        log.handlers.clear()

    def _write_config(self, tmp: Path, body: str) -> Path:
        config_path = tmp / "config.yml"
        config_path.write_text(body, encoding="utf-8")
        return config_path

    def test_build_writes_json_report(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            tmp = Path(temp_dir)
            output_dir = tmp / "output"
            config_path = self._write_config(tmp, _CONFIG_TEMPLATE.format(base_dir=output_dir.as_posix()))

            result = CliRunner().invoke(cli, ["--config", str(config_path), "build"])

            self.assertEqual(result.exit_code, 0, result.output)
            output_files = list((output_dir / "json").glob("build_*.json"))
            self.assertEqual(len(output_files), 1)
            data = json.loads(output_files[0].read_text(encoding="utf-8"))

        self.assertEqual([item["name"] for item in data], ["active_users", "everything"])
        self.assertEqual(data[0]["sql"], "SELECT id, email FROM users WHERE status = ? LIMIT 10")
        self.assertEqual(data[0]["parameters"], ["active"])
        self.assertEqual(data[0]["analysis"]["rating"], "Good")
        self.assertEqual(data[1]["document"], {"query": {"match_all": {}}, "size": 5000})
        self.assertEqual(data[1]["analysis"]["rating"], "Fair")

    def test_build_failure_aborts(self) -> None:
        body = """
output:
  base_dir: {base_dir}
  formats: [json]

queries:
  - name: missing_table
    type: relational
    select: [id]
"""
        with tempfile.TemporaryDirectory() as temp_dir:
            tmp = Path(temp_dir)
            output_dir = tmp / "output"
            config_path = self._write_config(tmp, body.format(base_dir=output_dir.as_posix()))

            result = CliRunner().invoke(cli, ["--config", str(config_path), "build"])

            self.assertNotEqual(result.exit_code, 0)
            self.assertFalse((output_dir / "json").exists())

    def test_invalid_config_is_reported(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = self._write_config(Path(temp_dir), "queries: []\n")

            result = CliRunner().invoke(cli, ["--config", str(config_path), "build"])

        self.assertNotEqual(result.exit_code, 0)
        self.assertIsInstance(result.exception, ValueError)


if __name__ == "__main__":
    unittest.main()
