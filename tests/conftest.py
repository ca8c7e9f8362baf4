import os
import pytest
from kupong.db import init_db

@pytest.fixture(scope='session', autouse=True)
def reset_db():
    # Ensure a clean DB for the test session
    dbfile = os.path.join(os.getcwd(), 'kupong.db')
    try:
        os.remove(dbfile)
    except FileNotFoundError:
        pass
    init_db()
    yield
    try:
        os.remove(dbfile)
    except OSError:
        pass
