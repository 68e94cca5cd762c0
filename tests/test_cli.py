"""Tests for the command line entry point (offline commands only)."""
import shorts_blocker
from config import Config

from test_devices import SHORTS_XML


class TestCli:
    def test_classify_shorts_dump(self, tmp_path, capsys):
        dump = tmp_path / "shorts.xml"
        dump.write_text(SHORTS_XML, encoding='utf-8')

        assert shorts_blocker.main(["--classify", str(dump), "--package", Config.YOUTUBE_PACKAGE]) == 0
        out = capsys.readouterr().out
        assert "Blocked: True" in out
        assert "shorts_viewer" in out

    def test_classify_unmonitored_package(self, tmp_path):
        dump = tmp_path / "shorts.xml"
        dump.write_text(SHORTS_XML, encoding='utf-8')
        assert shorts_blocker.main(["--classify", str(dump), "--package", "com.android.chrome"]) == 1

    def test_set_and_get_action(self, tmp_path, capsys):
        prefs = str(tmp_path / "prefs.json")
        assert shorts_blocker.main(["--prefs", prefs, "--set-action", "recents"]) == 0
        assert shorts_blocker.main(["--prefs", prefs, "--get-action"]) == 0
        assert capsys.readouterr().out.strip().splitlines()[-1] == "Block action: RECENTS"

    def test_classify_missing_file(self, tmp_path, capsys):
        missing = tmp_path / "missing.xml"
        assert shorts_blocker.main(["--classify", str(missing)]) == 1
        assert capsys.readouterr().out.startswith("ERROR: cannot read")
