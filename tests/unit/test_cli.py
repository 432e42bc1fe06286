"""
Tests for the redis-scripts command-line interface
"""
import hashlib
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from redis.exceptions import ConnectionError

from core.cli import cli

SHA_A = hashlib.sha1(b"return 'a'").hexdigest()


@pytest.fixture
def script_dir(tmp_path, write_script):
    write_script("a.lua", "return 'a'")
    write_script("sub/pair.lua", "return {KEYS[1], ARGV[1]}")
    return tmp_path


@pytest.fixture
def invoke(fake_redis, script_dir, monkeypatch):
    monkeypatch.setattr("core.cli.setup_logging", lambda settings: None)
    runner = CliRunner()

    def _invoke(*args):
        with patch("redis_scripts.adapter.redis.from_url", return_value=fake_redis) as from_url:
            result = runner.invoke(cli, ["--redis-url", "redis://test:6379/0", "--path", str(script_dir), *args])
        from_url.assert_called_once()
        assert from_url.call_args[0][0] == "redis://test:6379/0"
        return result

    return _invoke


class TestCli:
    def test_list(self, invoke, script_dir):
        result = invoke("list")

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == f"a\t{SHA_A}\t{script_dir / 'a.lua'}"
        assert lines[1].startswith("sub/pair\t")

    def test_run(self, invoke):
        result = invoke("run", "a")

        assert result.exit_code == 0
        assert result.output == "a\n"

    def test_run_with_keys_and_args(self, invoke):
        result = invoke("run", "sub/pair", "--key", "k1", "v1")

        assert result.exit_code == 0
        assert result.output == '["k1", "v1"]\n'

    def test_run_unknown_script(self, invoke):
        result = invoke("run", "missing")

        assert result.exit_code == 1
        assert "no such script: missing" in result.output

    def test_exists_and_load_all(self, invoke):
        assert invoke("exists", "a").output == "false\n"

        result = invoke("load-all")
        assert result.exit_code == 0
        assert f"loaded a {SHA_A}" in result.output

        assert invoke("exists", "a").output == "true\n"

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_exists_reports_redis_errors(self, invoke, fake_redis, monkeypatch):
        def unreachable(*shas):
            raise ConnectionError("Error 111 connecting to redis:6379. Connection refused.")

        monkeypatch.setattr(fake_redis, "script_exists", unreachable)

        result = invoke("exists", "a")

        assert result.exit_code == 1
        assert "Connection refused" in result.output
        assert "Traceback" not in result.output

    def test_list_reports_unreadable_script(self, invoke, script_dir):
        (script_dir / "dangling.lua").symlink_to(script_dir / "nowhere.lua")

        result = invoke("list")

        assert result.exit_code == 1
        assert "cannot read" in result.output
        assert "dangling.lua" in result.output
