
import pytest
import os
import sys
from unittest.mock import MagicMock, patch

# Add project root to Python Path so modules can be imported
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tests.builders import daily_history

# ============================================================================
# 1. GLOBAL MOCKS (ENV VARS & APIS)
# ============================================================================

@pytest.fixture(autouse=True)
def mock_env_vars(tmp_path):
    """Sets up fake environment variables for all tests."""
    with patch.dict(os.environ, {
        "GEMINI_API_KEY": "fake_key",
        "MONGODB_URI": "mongodb://fake-host:27017",
        "MOODLENS_LOG_DIR": str(tmp_path / "logs"),
    }):
        yield

@pytest.fixture
def mock_genai():
    """Mocks Google Generative AI (Gemini)."""
    with patch("moodlens.adapters.clients.gemini.genai") as mock:
        # Configure
        mock.configure = MagicMock()

        # Model
        model_instance = MagicMock()
        mock.GenerativeModel.return_value = model_instance

        # Default happy path response
        response = MagicMock()
        response.text = "You are doing well.\n- Keep going"
        model_instance.generate_content.return_value = response

        yield mock

@pytest.fixture
def mock_collection():
    """Mocks a pymongo entries collection."""
    return MagicMock()

# ============================================================================
# 2. HISTORY BUILDERS
# ============================================================================

@pytest.fixture
def improving_history():
    """Ten daily entries climbing from 3.0 to 7.5."""
    return daily_history([3.0 + 0.5 * i for i in range(10)])


@pytest.fixture
def declining_history():
    """Ten daily entries falling from 8.0 to 3.5."""
    return daily_history([8.0 - 0.5 * i for i in range(10)])
