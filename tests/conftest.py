import os

# Tests must never pick up an operator's project directory from the environment
os.environ.pop("TWENTY_OPS_PROJECT_DIR", None)

from tests.fixtures import *  # noqa: F401,F403,E402
