pytest_plugins = [
    "tests.fixtures.storage_fixtures",
    "tests.fixtures.app_fixtures",
]
