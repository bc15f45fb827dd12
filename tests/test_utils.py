import pytest
from pathlib import Path
import sys

# Add repo root to path
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from buddhabrot import utils


def test_parse_size():
    assert utils.parse_size("512") == (512, 512)
    assert utils.parse_size("1024x768") == (1024, 768)
    assert utils.parse_size(" 64 X 32 ") == (64, 32)
    with pytest.raises(ValueError):
        utils.parse_size("big")


def test_log_respects_verbose(capsys):
    utils.set_verbose(False)
    utils.log("hidden")
    utils.set_verbose(True)
    utils.log("[sample] shown")
    utils.set_verbose(False)
    assert capsys.readouterr().out == "[sample] shown\n"
