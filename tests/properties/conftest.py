from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

# Examples that build repositories with the git CLI are slow and reuse
# function-scoped fixtures across examples.
settings.register_profile(
    "git",
    max_examples=25,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.property)
