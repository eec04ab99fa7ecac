from fastapi import HTTPException
from bson import ObjectId
from bson.errors import InvalidId

from utils.errors import SettingsValidationError

# -------------------------------
# ObjectId Guards
# -------------------------------

def parse_object_id(value: str, name: str = "id") -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {name}")


def as_object_id(value, name: str = "seller_id") -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise SettingsValidationError(f"Invalid {name}", field=name)
