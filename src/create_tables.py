import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.extensions import db
from src.main import create_app
from user.init_data import seed_all


def create_tables(drop=False):
    # Importing the package registers every model with the metadata
    import models  # noqa: F401

    if drop:
        db.drop_all()
    db.create_all()
    print("All tables created successfully")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        create_tables(drop="--drop" in sys.argv)
        admin = seed_all()
        print("Roles, categories and company settings seeded")
        if admin:
            print("Default admin created: email=admin@example.com, password=admin123")
            print("Please change the default password after first login.")
