from __future__ import annotations

from pathlib import Path
import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

import yaml

from apphosting_nuxt import cli
from apphosting_nuxt.command_runner import RecordingCommandRunner


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        (self.root / "resolved.json").write_text(json.dumps({"ssr": False, "app": {"baseURL": "/app"}}))
        public = self.root / ".output" / "public"
        public.mkdir(parents=True)
        (public / "200.html").write_text("<html></html>")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli.main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def _common(self) -> list[str]:
        return ["--project-root", str(self.root), "--config-file", "resolved.json"]

    def test_build_runs_full_pipeline(self) -> None:
        runner = RecordingCommandRunner()
        with patch("apphosting_nuxt.build.SubprocessCommandRunner", return_value=runner):
            code, out, err = self._run("build", *self._common())

        self.assertEqual(code, 0, err)
        self.assertEqual(runner.commands[0].command, ["npm", "run", "generate"])
        self.assertIn("Output bundle written to", out)
        bundle_yaml = self.root / ".apphosting" / "bundle.yaml"
        with bundle_yaml.open(encoding="utf-8") as handle:
            manifest = yaml.safe_load(handle)
        self.assertEqual(manifest["rewrites"], [{"source": "/app/**", "destination": "/app/200.html"}])
        self.assertTrue((self.root / ".apphosting" / "public" / "200.html").exists())

    def test_build_command_from_environment(self) -> None:
        runner = RecordingCommandRunner()
        with patch("apphosting_nuxt.build.SubprocessCommandRunner", return_value=runner), patch.dict(
            "os.environ", {cli.COMMAND_ENV_VAR: "yarn"}
        ):
            code, _, err = self._run("build", *self._common())

        self.assertEqual(code, 0, err)
        self.assertEqual(runner.commands[0].command, ["yarn", "run", "generate"])

    def test_dry_run_does_not_touch_bundle(self) -> None:
        code, out, _ = self._run("build", *self._common(), "--dry-run", "--command", "pnpm")

        self.assertEqual(code, 0)
        self.assertIn("[dry-run] Build Nuxt application", out)
        self.assertIn("NITRO_PRESET=node pnpm run generate", out)
        self.assertIn("Base URL: /app", out)
        self.assertFalse((self.root / ".apphosting").exists())

    def test_build_failure_reports_error(self) -> None:
        runner = RecordingCommandRunner(returncode=1)
        with patch("apphosting_nuxt.build.SubprocessCommandRunner", return_value=runner):
            code, _, err = self._run("build", *self._common())

        self.assertEqual(code, 1)
        self.assertIn("Error: Was unable to build your Nuxt application.", err)
        self.assertFalse((self.root / ".apphosting").exists())

    def test_config_prints_yaml(self) -> None:
        code, out, _ = self._run("config", *self._common())

        self.assertEqual(code, 0)
        self.assertEqual(yaml.safe_load(out), {"ssr": False, "app": {"baseURL": "/app"}})


if __name__ == "__main__":
    unittest.main()
