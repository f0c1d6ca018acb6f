"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Team


def make_teams(*names):
    """Teams whose id is the lower-cased name."""
    return [Team(name=name, id=name.lower()) for name in names]


@pytest.fixture
def four_teams():
    return make_teams('A', 'B', 'C', 'D')


@pytest.fixture
def eight_teams():
    return make_teams('A', 'B', 'C', 'D', 'E', 'F', 'G', 'H')


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the web app at an empty temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return data_dir


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
