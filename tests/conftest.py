"""Pytest configuration and shared fixtures for the tracker tests."""
import sys
import logging
from pathlib import Path

import numpy as np
import pytest

# Add the project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from roitracker.config.settings import Config
from roitracker.core.entities import Rect, ReferencePatch
from roitracker.core.features import FeatureExtractor
from roitracker.core.logging_config import clear_target_id
from tests.helpers import make_textured_frame


# Configure logging for tests
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)


@pytest.fixture(autouse=True)
def _reset_target_id():
    yield
    clear_target_id()


@pytest.fixture(scope="session")
def textured_frame_template():
    return make_textured_frame()


@pytest.fixture
def textured_frame(textured_frame_template):
    return textured_frame_template.copy()


@pytest.fixture
def blank_frame():
    return np.full((480, 640, 3), 128, dtype=np.uint8)


@pytest.fixture
def config():
    """Default configuration, no files touched."""
    return Config(enable_file_logging=False)


@pytest.fixture
def extractor():
    return FeatureExtractor()


@pytest.fixture
def patch_rect():
    # offsets on a 32px grid keep the crop's SIFT pyramid aligned with the full frame
    return Rect(192, 128, 192, 160)


@pytest.fixture
def reference_patch(textured_frame, extractor, patch_rect):
    r = patch_rect
    crop = textured_frame[r.y:r.y + r.height, r.x:r.x + r.width].copy()
    return ReferencePatch(image=crop, rect=r, features=extractor.extract(crop), target_id="t-test")
