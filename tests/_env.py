"""
Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
import tempfile

TEST_AUTH_TOKEN = "test-token"

_TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"alertkeeper-test-{os.getpid()}.db")


def ensure_test_env() -> None:
    os.environ.setdefault("APP_ENV", "test")
    os.environ.setdefault("LOG_LEVEL", "info")
    os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DB_PATH}")
    os.environ.setdefault("AUTH_TOKEN", TEST_AUTH_TOKEN)
    os.environ.setdefault("PROMETHEUS_URL", "http://prometheus.test")
    os.environ.setdefault("ALERTMANAGER_URL", "http://alertmanager.test")
    os.environ.setdefault("DEFAULT_TIMEOUT", "5")


def remove_test_database() -> None:
    try:
        os.remove(_TEST_DB_PATH)
    except FileNotFoundError:
        pass
