import sys
from pathlib import Path

import pytest
import soundfile as sf

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from audiohash.config import TARGET_SR


@pytest.fixture
def wav_factory(tmp_path):
    def write(name, samples, sample_rate=TARGET_SR):
        path = tmp_path / name
        sf.write(path, samples, sample_rate)
        return path
    return write
