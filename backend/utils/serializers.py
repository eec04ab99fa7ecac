from models.admission import AdmissionDecision
from models.store_settings import StoreSettings


def serialize_settings(settings: StoreSettings) -> dict:
    return settings.model_dump(mode="json")


def serialize_settings_list(items):
    return [serialize_settings(s) for s in items]


def serialize_decision(decision: AdmissionDecision) -> dict:
    return {
        "allowed": decision.allowed,
        "reason_code": decision.reason_code.value if decision.reason_code else None,
        "message": decision.message,
        "limits": decision.details,
    }
