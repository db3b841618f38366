# charity_records/schemas.py
"""Shape of the persisted document and of the records it holds.

Field aliases are the keys used by the JSON backup format, so a document
dumped with ``by_alias=True`` can be restored by older and newer versions
alike.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["manager", "user"]
MaritalStatus = Literal["single", "married", "divorced", "widowed"]
ResearchResult = Literal["accepted", "rejected"]
OperationStatus = Literal["pending", "accepted", "rejected"]
DisbursementStatus = Literal["in_progress", "disbursed"]

ROLES = ("manager", "user")
MARITAL_STATUSES = ("single", "married", "divorced", "widowed")
RESEARCH_RESULTS = ("accepted", "rejected")
OPERATION_STATUSES = ("pending", "accepted", "rejected")
DISBURSEMENT_STATUSES = ("in_progress", "disbursed")


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Note(Record):
    text: str
    date: str  # ISO-8601 UTC timestamp


class User(Record):
    id: int
    name: str = ""
    mobile: str = ""
    username: str
    password: str  # bcrypt hash
    role: Role = "user"


class Employee(Record):
    name: str = ""
    national_id: str
    phone: str = ""
    governorate: str = ""
    city: str = ""
    area: str = ""
    is_frozen: bool = False


class Beneficiary(Record):
    code: str = ""
    name: str = ""
    national_id: str
    join_date: str = ""
    phone: str = ""
    alternative_phone: Optional[str] = None
    governorate: str = ""
    city: str = ""
    area: str = ""
    detailed_address: str = ""
    job: str = ""
    family_members: int = 1
    marital_status: MaritalStatus = "single"
    spouse_name: Optional[str] = None
    employee_national_id: str = ""
    is_blacklisted: bool = False
    notes: List[Note] = Field(default_factory=list)
    researcher_receipt_date: Optional[str] = None
    research_submission_date: Optional[str] = None
    research_result: Optional[ResearchResult] = None


class AssistanceType(Record):
    id: int
    name: str = ""


class Operation(Record):
    id: int
    code: str = ""
    beneficiary_national_id: str
    assistance_id: Optional[int] = None
    amount: float = 0
    date: str = ""
    committee_number: Optional[str] = None
    committee_decision_description: Optional[str] = None
    spending_entity: str = ""
    details: Optional[str] = None
    status: OperationStatus = "pending"
    acceptance_date: Optional[str] = None
    pending_date: Optional[str] = None
    disbursement_status: Optional[DisbursementStatus] = None
    disbursement_date: Optional[str] = None


class Task(Record):
    id: int
    user_id: int = Field(alias="userId")
    text: str
    is_completed: bool = Field(False, alias="isCompleted")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class Document(Record):
    users: List[User] = Field(default_factory=list)
    employees: List[Employee]
    beneficiaries: List[Beneficiary]
    assistance_types: List[AssistanceType] = Field(alias="assistanceTypes")
    operations: List[Operation]
    tasks: List[Task] = Field(default_factory=list)
    organization_name: str = Field("", alias="organizationName")
    organization_logo: str = Field("", alias="organizationLogo")

    def dump(self) -> dict:
        """Plain dict in backup format."""
        return self.model_dump(by_alias=True)

    def get_user(self, user_id: int) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users if u.username == username), None)

    def get_employee(self, national_id: str) -> Optional[Employee]:
        return next((e for e in self.employees if e.national_id == national_id), None)

    def get_beneficiary(self, national_id: str) -> Optional[Beneficiary]:
        return next((b for b in self.beneficiaries if b.national_id == national_id), None)

    def get_assistance_type(self, type_id: int) -> Optional[AssistanceType]:
        return next((a for a in self.assistance_types if a.id == type_id), None)

    def get_operation(self, operation_id: int) -> Optional[Operation]:
        return next((o for o in self.operations if o.id == operation_id), None)


# --- Request payloads ---

class UserCreate(BaseModel):
    name: str = ""
    mobile: str = ""
    username: str = ""
    password: str = ""
    role: Role = "user"


class UserUpdate(BaseModel):
    name: str = ""
    mobile: str = ""
    role: Role = "user"


class PasswordChange(BaseModel):
    password: str = ""


class EmployeeIn(BaseModel):
    name: str = ""
    national_id: str = ""
    phone: str = ""
    governorate: str = ""
    city: str = ""
    area: str = ""


class FreezeRequest(BaseModel):
    national_ids: List[str]
    frozen: bool = True


class BeneficiaryIn(BaseModel):
    name: str = ""
    national_id: str = ""
    join_date: str = ""
    phone: str = ""
    alternative_phone: Optional[str] = None
    governorate: str = ""
    city: str = ""
    area: str = ""
    detailed_address: str = ""
    job: str = ""
    family_members: int = 1
    marital_status: MaritalStatus = "single"
    spouse_name: Optional[str] = None
    employee_national_id: str = ""
    is_blacklisted: bool = False
    researcher_receipt_date: Optional[str] = None
    research_submission_date: Optional[str] = None
    research_result: Optional[ResearchResult] = None


class BlacklistRequest(BaseModel):
    national_ids: List[str]
    blacklisted: bool = True


class NoteIn(BaseModel):
    text: str = ""


class AssistanceTypeIn(BaseModel):
    name: str = ""


class OperationIn(BaseModel):
    beneficiary_national_id: str = ""
    assistance_id: Optional[int] = None
    amount: float = 0
    date: str = ""
    committee_number: Optional[str] = None
    committee_decision_description: Optional[str] = None
    spending_entity: str = ""
    details: Optional[str] = None
    status: OperationStatus = "pending"
    acceptance_date: Optional[str] = None
    pending_date: Optional[str] = None
    disbursement_status: Optional[DisbursementStatus] = None
    disbursement_date: Optional[str] = None


class IdList(BaseModel):
    ids: List[int]


class TaskIn(BaseModel):
    text: str = ""


class OrganizationIn(BaseModel):
    name: str = ""
    logo: str = ""


class IncentiveRequest(BaseModel):
    employee_national_id: str
    start_date: str = ""
    end_date: str = ""
    # beneficiary national id -> "internal" | "external"
    classifications: dict = Field(default_factory=dict)


# Enum labels written by the first (Arabic-only) release of the application
LEGACY_LABELS = {
    "مدير": "manager",
    "مستخدم": "user",
    "أعزب": "single",
    "متزوج": "married",
    "مطلق": "divorced",
    "أرمل": "widowed",
    "مقبول": "accepted",
    "مرفوض": "rejected",
    "مقبوله": "accepted",
    "مرفوضه": "rejected",
    "معلقة": "pending",
    "تم الصرف": "disbursed",
    "جاري التنفيذ": "in_progress",
}


def translate_label(value):
    if isinstance(value, str):
        return LEGACY_LABELS.get(value.strip(), value)
    return value
