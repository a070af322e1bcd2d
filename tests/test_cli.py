from __future__ import annotations

import io
import json
import unittest
from contextlib import redirect_stderr, redirect_stdout

from tinytd.cli import main


def _run(argv: list[str]) -> tuple[int, str]:
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        code = main(argv)
    return code, buffer.getvalue()


class CliTests(unittest.TestCase):
    def test_json_report_for_defended_wave(self) -> None:
        code, output = _run(["--waves", "1", "--tower", "100,350", "--format", "json"])
        self.assertEqual(code, 0)

        payload = json.loads(output)
        self.assertEqual(payload["map_id"], "meadow")
        self.assertEqual(payload["placements"], [{"accepted": True, "reason": None, "tower_uid": 1}])

        (wave,) = payload["waves"]
        self.assertEqual(wave["wave"], 1)
        self.assertEqual(wave["spawned"], 12)
        self.assertEqual(wave["killed"] + wave["leaked"], 12)
        self.assertFalse(wave["timed_out"])
        self.assertEqual(payload["final"]["towers"], 1)
        self.assertEqual(payload["final"]["cash"], 50 + 10 * wave["killed"])

    def test_table_report_lists_rejections(self) -> None:
        code, output = _run(["--waves", "0", "--tower", "300,225", "--tower", "400,500", "--map", "meadow"])
        self.assertEqual(code, 0)
        self.assertIn("Towers: placed x1, on_path x1", output)
        self.assertIn("No waves were run.", output)
        self.assertIn("Map: meadow  Wave: 0  Cash: 50  Lives: 20", output)

    def test_undefended_waves_end_in_game_over(self) -> None:
        code, output = _run(["--waves", "5", "--format", "json"])
        payload = json.loads(output)
        self.assertEqual(code, 1)
        self.assertTrue(payload["final"]["game_over"])
        self.assertEqual(payload["final"]["lives"], 0)
        self.assertTrue(payload["waves"][-1]["game_over"])

    def test_bad_arguments_exit_with_usage_error(self) -> None:
        for argv in (["--tower", "nope"], ["--map", "nowhere"], ["--dt", "0"], ["--config", "missing.json"]):
            with self.subTest(argv=argv):
                with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as ctx:
                    main(argv)
                self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
