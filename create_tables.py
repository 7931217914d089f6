from minter_service.app.db.base import Base
from minter_service.app.db.session import engine

# force import models so SQLAlchemy knows them
from minter_service.app.models.item import Collection, Item, Seed  # noqa
from minter_service.app.models.payment import PaymentRequest, WebhookEvent  # noqa
from minter_service.app.models.user import User  # noqa

print("Creating tables...")
Base.metadata.create_all(bind=engine)
print("Done.")
