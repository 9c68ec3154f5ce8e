import os
import subprocess
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
PROGRAMS = os.path.join(ROOT, "tests", "programs")


def run_cli(*args):
    cli = os.path.join(ROOT, "cli.py")

    return subprocess.run(
        [sys.executable, cli, *args],
        text=True,
        capture_output=True,
        cwd=ROOT,
        timeout=10,
    )


def program(name):
    return os.path.join(PROGRAMS, name)


def test_run_prints_commands_in_order():
    proc = run_cli("run", program("tower.mb"))
    if proc.returncode != 0:
        raise AssertionError(f"CLI exited with code {proc.returncode}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}")

    assert proc.stdout.splitlines() == [
        'setBlock(0, 0, 0, "cobblestone")',
        'setBlock(0, 1, 0, "cobblestone")',
        'setBlock(0, 2, 0, "cobblestone")',
        'setBlock(0, 3, 0, "glass")',
        "# 4 blocks",
    ]


def test_run_reports_runtime_error_without_placing():
    proc = run_cli("run", program("broken.mb"))
    assert proc.returncode == 1
    assert "setBlock(" not in proc.stdout
    assert "Undefined variable 'width'" in proc.stdout


def test_run_with_step_budget():
    proc = run_cli("run", program("forever.mb"), "--max-steps", "200")
    assert proc.returncode == 1
    assert "Step limit exceeded" in proc.stdout


def test_parse_prints_tree():
    proc = run_cli("parse", program("tower.mb"))
    assert proc.returncode == 0
    assert "type: Program" in proc.stdout
    assert "type: While" in proc.stdout
    assert "type: SetBlock" in proc.stdout


def test_tokens_lists_stream():
    proc = run_cli("tokens", program("tower.mb"))
    assert proc.returncode == 0
    assert "SETBLOCK" in proc.stdout
    assert proc.stdout.rstrip().endswith("EOF")


def test_missing_file():
    proc = run_cli("run", program("does_not_exist.mb"))
    assert proc.returncode == 1


def test_usage_without_arguments():
    proc = run_cli()
    assert proc.returncode == 1
    assert "Usage:" in proc.stdout
