import pytest

from routers import request_status


@pytest.fixture(autouse=True)
def reset_request_status():
    """Keep in-memory request status isolated between tests."""
    request_status._local_states.clear()
    request_status._local_workers.clear()
    yield
    request_status._local_states.clear()
    request_status._local_workers.clear()
