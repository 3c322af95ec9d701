from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RatiosBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RecordModel(BaseModel):
    # Curated records carry extra policy fields we never read.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RegionCode(str, Enum):
    AL = "AL"
    AK = "AK"
    AZ = "AZ"
    AR = "AR"
    CA = "CA"
    CO = "CO"
    CT = "CT"
    DE = "DE"
    DC = "DC"
    FL = "FL"
    GA = "GA"
    HI = "HI"
    ID = "ID"
    IL = "IL"
    IN = "IN"
    IA = "IA"
    KS = "KS"
    KY = "KY"
    LA = "LA"
    ME = "ME"
    MD = "MD"
    MA = "MA"
    MI = "MI"
    MN = "MN"
    MS = "MS"
    MO = "MO"
    MT = "MT"
    NE = "NE"
    NV = "NV"
    NH = "NH"
    NJ = "NJ"
    NM = "NM"
    NY = "NY"
    NC = "NC"
    ND = "ND"
    OH = "OH"
    OK = "OK"
    OR = "OR"
    PA = "PA"
    RI = "RI"
    SC = "SC"
    SD = "SD"
    TN = "TN"
    TX = "TX"
    UT = "UT"
    VT = "VT"
    VA = "VA"
    WA = "WA"
    WV = "WV"
    WI = "WI"
    WY = "WY"


class AgencyType(str, Enum):
    saa = "SAA"
    oa = "OA"


EXPECTED_REGION_CODES = tuple(item.value for item in RegionCode)
AGENCY_TYPES = frozenset(item.value for item in AgencyType)
REQUIRED_REQUIREMENT_FIELDS = ("requirementType", "ratioDescription", "statute", "statuteUrl")

REGION_NAMES = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "DC": "District of Columbia",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
}


def region_display_name(code: str) -> str:
    return REGION_NAMES.get(code, code)


class IndexDocument(RecordModel):
    last_updated: str | None = Field(default=None, alias="lastUpdated")
    states: dict[str, Any]


class Requirement(RecordModel):
    ratio_value: Any = Field(default=None, alias="ratioValue")


class RegionRecord(RecordModel):
    """Read view of a region file, limited to the fields the search index emits.

    Types are left open so that records the verifier only warns about can
    still be loaded by downstream tooling.
    """

    agency_type: Any = Field(default=None, alias="agencyType")
    has_public_works_requirement: Any = Field(default=None, alias="hasPublicWorksRequirement")
    requirement: Requirement | None = None

    @field_validator("requirement", mode="before")
    @classmethod
    def drop_non_object_requirement(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value
        return None


class SearchIndexEntry(RatiosBaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: str = "state"
    text: str
    state: str
    state_name: str = Field(alias="stateName")
    has_requirement: Any = Field(default=None, alias="hasRequirement")
    agency_type: Any = Field(default=None, alias="agencyType")
    ratio_value: Any = Field(default=None, alias="ratioValue")
    url: str
