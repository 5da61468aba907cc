import pytest

from boredom_dial.models import BotProfile


@pytest.fixture
def profile() -> BotProfile:
    return BotProfile(id="bot-test", name="Testy Tess", target=60, volatility=10, interval=0.01)
