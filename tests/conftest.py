"""
Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT in sys.path:
    sys.path.remove(ROOT)
sys.path.insert(0, ROOT)

from tests._env import ensure_test_env  # noqa: E402

# config is read once at import; pin the test environment before any module loads it
ensure_test_env()


def pytest_sessionfinish(session, exitstatus):
    from tests._env import remove_test_database

    remove_test_database()
