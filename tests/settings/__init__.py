import os

DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite:///edgy_sortable.sqlite")
