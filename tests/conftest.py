import os
import warnings

# Ignore warnings from app.shared
warnings.filterwarnings("ignore", category=DeprecationWarning, module="app.shared.*")

# Tests never reach a real compute provider or a shared Redis
os.environ.update(
    {
        "DEMO_MODE": "true",
        "CHANNEL_LOCK_ENABLED": "false",
        "PROVISION_POLL_INTERVAL_SECONDS": "0",
    }
)

# Import fixtures so they are available to all tests
from tests.fixtures.compute_fixtures import *  # noqa: E402, F403
from tests.fixtures.mongo_fixtures import *  # noqa: E402, F403
