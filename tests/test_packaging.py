import tomllib
from pathlib import Path

from asma import __version__

ROOT = Path(__file__).resolve().parents[1]


def test_project_metadata():
    meta = tomllib.loads((ROOT / "pyproject.toml").read_text())["project"]
    assert meta["version"] == __version__
    assert meta["readme"] == "README.md"
    assert (ROOT / meta["readme"]).read_text().startswith("# asma")
