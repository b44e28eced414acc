from dataclasses import dataclass, fields
from datetime import datetime


def camel(name: str) -> str:
    """patient_id -> patientId (Firestore documents use camelCase keys)."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass
class FirestoreModel:
    """Base for documents stored in Firestore.

    ``id`` is the document id and is never written into the document body.
    """

    id: str | None = None

    @classmethod
    def from_doc(cls, doc_id: str | None, data: dict | None):
        data = data or {}
        kwargs = {}
        for f in fields(cls):
            if f.name == "id":
                continue
            key = camel(f.name)
            if key in data:
                kwargs[f.name] = data[key]
        return cls(id=doc_id, **kwargs)

    def to_dict(self, skip_none: bool = False) -> dict:
        out = {}
        for f in fields(self):
            if f.name == "id":
                continue
            value = getattr(self, f.name)
            if skip_none and value is None:
                continue
            out[camel(f.name)] = value
        return out

    def to_json(self) -> dict:
        body = {"id": self.id}
        for key, value in self.to_dict().items():
            body[key] = value.isoformat() if isinstance(value, datetime) else value
        return body
