from app.models.models import StoreStateRecord

__all__ = [
    "StoreStateRecord",
]
