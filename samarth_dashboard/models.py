"""
Typed district record produced by the normaliser and consumed by the
upsert engine. Raw report rows never travel past the normaliser.
"""

from dataclasses import dataclass


@dataclass
class DistrictMetrics:
    """One district's performance figures as stored in the districts collection."""

    id: str
    district_name: str
    hps_score: float = 0.0
    nbws_executed: float = 0.0
    conviction_ratio: float = 0.0
    drug_seizure_kg: float = 0.0
    cases_solved: float = 0.0
    recognitions: float = 0.0
    zone: str | None = None
    last_updated: str | None = None

    def to_document(self) -> dict:
        """Return the persisted fields, leaving out the key and unset optionals.

        An unset zone is omitted so a merge keeps whatever zone the stored
        document already has.
        """
        doc = {
            "district_name": self.district_name,
            "hps_score": self.hps_score,
            "nbws_executed": self.nbws_executed,
            "conviction_ratio": self.conviction_ratio,
            "drug_seizure_kg": self.drug_seizure_kg,
            "cases_solved": self.cases_solved,
            "recognitions": self.recognitions,
        }
        if self.zone is not None:
            doc["zone"] = self.zone
        if self.last_updated is not None:
            doc["last_updated"] = self.last_updated
        return doc
