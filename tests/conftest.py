from datetime import datetime

import pytest
from pytz import utc

from clockrings.models import WorldCity


@pytest.fixture
def at():
    """12:30 UTC: Kolkata reads 18:00, so its label sits on the seam."""
    return datetime(2024, 1, 15, 12, 30, tzinfo=utc)


@pytest.fixture
def kolkata():
    return WorldCity.make("Asia/Kolkata")  # 18:00 → 0°


@pytest.fixture
def kathmandu():
    return WorldCity.make("Asia/Kathmandu")  # 18:15 → 3.75°


@pytest.fixture
def dhaka():
    return WorldCity.make("Asia/Dhaka")  # 18:30 → 7.5°


@pytest.fixture
def yangon():
    return WorldCity.make("Asia/Yangon")  # 19:00 → 15°


@pytest.fixture
def central():
    return WorldCity.make("Etc/GMT+6")  # 06:30 → 187.5°


@pytest.fixture
def karachi():
    return WorldCity.make("Asia/Karachi")  # 17:30 → 352.5°
