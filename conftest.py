# conftest.py
import dataclasses

import matplotlib
import pytest

from pyfdhelm.core.settings import FACE


@pytest.fixture(autouse=True)
def mpl_test_backend():
    """Non-interactive plotting; every figure a test opens is closed afterwards."""
    matplotlib.use('Agg')
    yield
    import matplotlib.pyplot as plt
    plt.close('all')


@pytest.fixture(autouse=True)
def face_settings_restored():
    """Tests may edit the global FACE settings in place."""
    saved = dataclasses.asdict(FACE)
    yield FACE
    for name, value in saved.items():
        setattr(FACE, name, value)
