# charity_records/crud.py
"""Record operations.

Every function takes the current ``Document`` and returns a new one; the
input snapshot is never modified. Invalid input raises ``ValidationFailed``
with a field -> message map, unknown records raise ``RecordNotFound``.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from charity_records.config import settings
from charity_records.exceptions import ActionForbidden, RecordNotFound, ValidationFailed
from charity_records.schemas import (
    AssistanceType, Beneficiary, BeneficiaryIn, Document, Employee, EmployeeIn, Note, Operation,
    OperationIn, Task, User, UserCreate, UserUpdate,
)
from charity_records.security import hash_password
from charity_records.seed import BOOTSTRAP_USERNAME
from charity_records.services import integrity
from charity_records.services.codes import (
    BENEFICIARY_PREFIX, OPERATION_PREFIX, is_valid_code, next_code, next_id,
)
from charity_records.services.validation_helper import check_mobile, check_national_id, require

logger = logging.getLogger(__name__)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2023-10-26T10:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _replace(items: list, match, new_item) -> list:
    return [new_item if match(item) else item for item in items]


# --- USER FUNCTIONS ---

def _validate_user_fields(document: Document, name: str, mobile: str, user_id: Optional[int] = None) -> dict:
    errors = {}
    require(errors, "name", name, "الاسم الكامل مطلوب.")
    check_mobile(errors, "mobile", mobile)
    if "mobile" not in errors and any(u.mobile == mobile.strip() and u.id != user_id for u in document.users):
        errors["mobile"] = "رقم المحمول هذا موجود بالفعل."
    return errors


def create_user(document: Document, data: UserCreate) -> Tuple[Document, User]:
    errors = _validate_user_fields(document, data.name, data.mobile)
    username = data.username.strip()
    if not username:
        errors["username"] = "اسم المستخدم مطلوب."
    elif any(u.username.lower() == username.lower() for u in document.users):
        errors["username"] = "اسم المستخدم هذا موجود بالفعل."
    if not data.password:
        errors["password"] = "كلمة المرور مطلوبة."
    if errors:
        raise ValidationFailed(errors)

    user = User(
        id=next_id(u.id for u in document.users),
        name=data.name.strip(),
        mobile=data.mobile.strip(),
        username=username,
        password=hash_password(data.password.strip()),
        role=data.role,
    )
    logger.info("Created user %s (%s)", user.username, user.role)
    return document.model_copy(update={"users": document.users + [user]}), user


def update_user(document: Document, user_id: int, data: UserUpdate) -> Document:
    user = document.get_user(user_id)
    if user is None:
        raise RecordNotFound("User not found")
    errors = _validate_user_fields(document, data.name, data.mobile, user_id=user_id)
    if errors:
        raise ValidationFailed(errors)

    role = user.role if user.username == BOOTSTRAP_USERNAME else data.role
    updated = user.model_copy(update={"name": data.name.strip(), "mobile": data.mobile.strip(), "role": role})
    return document.model_copy(update={"users": _replace(document.users, lambda u: u.id == user_id, updated)})


def change_user_password(document: Document, user_id: int, password: str) -> Document:
    user = document.get_user(user_id)
    if user is None:
        raise RecordNotFound("User not found")
    if not (password or "").strip():
        raise ValidationFailed({"password": "كلمة المرور مطلوبة."})
    updated = user.model_copy(update={"password": hash_password(password.strip())})
    return document.model_copy(update={"users": _replace(document.users, lambda u: u.id == user_id, updated)})


def delete_users(document: Document, user_ids: Iterable[int], acting_user_id: int) -> Tuple[Document, List[int]]:
    """Deletes the given users, skipping the bootstrap manager and the acting user."""
    ids = set(user_ids)
    deletable = [
        u.id for u in document.users
        if u.id in ids and u.username != BOOTSTRAP_USERNAME and u.id != acting_user_id
    ]
    if not deletable:
        raise ActionForbidden("None of the selected users can be deleted")
    users = [u for u in document.users if u.id not in deletable]
    logger.info("Deleted users %s", deletable)
    return document.model_copy(update={"users": users}), deletable


# --- EMPLOYEE FUNCTIONS ---

def _validate_employee(document: Document, data: EmployeeIn, original_id: Optional[str] = None) -> dict:
    errors = {}
    require(errors, "name", data.name, "الاسم مطلوب.")
    check_national_id(errors, "national_id", data.national_id)
    national_id = data.national_id.strip()
    if "national_id" not in errors and national_id != original_id and document.get_employee(national_id):
        errors["national_id"] = "الرقم القومي موجود بالفعل لموظف آخر."
    check_mobile(errors, "phone", data.phone)
    require(errors, "governorate", data.governorate, "المحافظة مطلوبة.")
    require(errors, "city", data.city, "المركز مطلوب.")
    require(errors, "area", data.area, "المنطقة مطلوبة.")
    return errors


def _employee_fields(data: EmployeeIn) -> dict:
    return {
        "name": data.name.strip(),
        "national_id": data.national_id.strip(),
        "phone": data.phone.strip(),
        "governorate": data.governorate,
        "city": data.city,
        "area": data.area.strip(),
    }


def add_employee(document: Document, data: EmployeeIn) -> Document:
    errors = _validate_employee(document, data)
    if errors:
        raise ValidationFailed(errors)
    employee = Employee(**_employee_fields(data))
    return document.model_copy(update={"employees": document.employees + [employee]})


def update_employee(document: Document, original_id: str, data: EmployeeIn) -> Document:
    """Edits an employee; a changed national id is carried over to their beneficiaries."""
    employee = document.get_employee(original_id)
    if employee is None or original_id == settings.VOLUNTEER_NATIONAL_ID:
        raise RecordNotFound("Employee not found")
    errors = _validate_employee(document, data, original_id=original_id)
    if errors:
        raise ValidationFailed(errors)

    updated = employee.model_copy(update=_employee_fields(data))
    document = document.model_copy(update={
        "employees": _replace(document.employees, lambda e: e.national_id == original_id, updated),
    })
    if updated.national_id != original_id:
        logger.info("Employee national id changed %s -> %s", original_id, updated.national_id)
        document = integrity.rename_employee(document, original_id, updated.national_id)
    return document


def set_employees_frozen(document: Document, national_ids: Iterable[str], frozen: bool) -> Document:
    ids = [i for i in national_ids if i != settings.VOLUNTEER_NATIONAL_ID]
    missing = [i for i in ids if document.get_employee(i) is None]
    if missing:
        raise RecordNotFound(f"Unknown employees: {', '.join(missing)}")
    return integrity.freeze_employees(document, ids, frozen)


# --- BENEFICIARY FUNCTIONS ---

def _validate_beneficiary(document: Document, data: BeneficiaryIn, is_new: bool) -> dict:
    errors = {}
    require(errors, "name", data.name, "الاسم مطلوب.")
    if is_new:
        check_national_id(errors, "national_id", data.national_id)
        if "national_id" not in errors and document.get_beneficiary(data.national_id.strip()):
            errors["national_id"] = "هذا الرقم القومي مسجل بالفعل."
    require(errors, "join_date", data.join_date, "تاريخ الانضمام مطلوب.")
    check_mobile(errors, "phone", data.phone)
    check_mobile(errors, "alternative_phone", data.alternative_phone, required=False)
    require(errors, "governorate", data.governorate, "المحافظة مطلوبة.")
    require(errors, "city", data.city, "المركز مطلوب.")
    require(errors, "area", data.area, "المنطقة مطلوبة.")
    require(errors, "detailed_address", data.detailed_address, "العنوان التفصيلي مطلوب.")
    require(errors, "job", data.job, "الوظيفة مطلوبة.")
    if data.family_members < 1:
        errors["family_members"] = "عدد أفراد الأسرة يجب أن يكون 1 على الأقل."
    if data.marital_status == "married":
        require(errors, "spouse_name", data.spouse_name, "اسم الزوج/الزوجة مطلوب.")

    employee_id = data.employee_national_id
    if not employee_id:
        errors["employee_national_id"] = "الموظف المسؤول مطلوب."
    elif employee_id != settings.VOLUNTEER_NATIONAL_ID:
        employee = document.get_employee(employee_id)
        if employee is None:
            errors["employee_national_id"] = "الموظف المسؤول غير موجود."
        elif employee.is_frozen:
            errors["employee_national_id"] = "لا يمكن إسناد مستفيدين إلى موظف مجمد."

    if data.research_submission_date and not data.research_result:
        errors["research_result"] = "نتيجة البحث مطلوبة عند تحديد تاريخ التسليم."
    return errors


def _beneficiary_fields(data: BeneficiaryIn) -> dict:
    fields = data.model_dump(exclude={"national_id"})
    for key in ("name", "phone", "area", "detailed_address", "job"):
        fields[key] = fields[key].strip()
    if data.marital_status != "married":
        fields["spouse_name"] = None
    return fields


def add_beneficiary(document: Document, data: BeneficiaryIn) -> Tuple[Document, Beneficiary]:
    errors = _validate_beneficiary(document, data, is_new=True)
    if errors:
        raise ValidationFailed(errors)
    beneficiary = Beneficiary(
        code=next_code((b.code for b in document.beneficiaries), BENEFICIARY_PREFIX),
        national_id=data.national_id.strip(),
        notes=[],
        **_beneficiary_fields(data),
    )
    return document.model_copy(update={"beneficiaries": document.beneficiaries + [beneficiary]}), beneficiary


def _needs_new_code(code: str, others: Iterable[str], prefix: str) -> bool:
    return not is_valid_code(code, prefix) or code in set(others)


def update_beneficiary(document: Document, national_id: str, data: BeneficiaryIn) -> Tuple[Document, Beneficiary, bool]:
    """
    Edits a beneficiary. The national id cannot change. A stored code that is
    malformed or shared with another beneficiary is replaced; the returned
    flag tells whether that happened.
    """
    current = document.get_beneficiary(national_id)
    if current is None:
        raise RecordNotFound("Beneficiary not found")
    errors = _validate_beneficiary(document, data, is_new=False)
    if errors:
        raise ValidationFailed(errors)

    code = current.code
    others = [b.code for b in document.beneficiaries if b.national_id != national_id]
    corrected = _needs_new_code(code, others, BENEFICIARY_PREFIX)
    if corrected:
        code = next_code((b.code for b in document.beneficiaries), BENEFICIARY_PREFIX)
        logger.info("Corrected beneficiary code %r -> %s", current.code, code)

    updated = current.model_copy(update={**_beneficiary_fields(data), "code": code})
    beneficiaries = _replace(document.beneficiaries, lambda b: b.national_id == national_id, updated)
    return document.model_copy(update={"beneficiaries": beneficiaries}), updated, corrected


def add_note(document: Document, national_id: str, text: str, now: Optional[datetime] = None) -> Document:
    current = document.get_beneficiary(national_id)
    if current is None:
        raise RecordNotFound("Beneficiary not found")
    if not (text or "").strip():
        raise ValidationFailed({"text": "نص الملاحظة مطلوب."})
    note = Note(text=text.strip(), date=utc_timestamp(now))
    updated = current.model_copy(update={"notes": current.notes + [note]})
    beneficiaries = _replace(document.beneficiaries, lambda b: b.national_id == national_id, updated)
    return document.model_copy(update={"beneficiaries": beneficiaries})


def set_blacklisted(document: Document, national_ids: Iterable[str], blacklisted: bool) -> Document:
    ids = set(national_ids)
    beneficiaries = [
        b.model_copy(update={"is_blacklisted": blacklisted}) if b.national_id in ids else b
        for b in document.beneficiaries
    ]
    return document.model_copy(update={"beneficiaries": beneficiaries})


# --- ASSISTANCE TYPE FUNCTIONS ---

def _assistance_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationFailed({"name": "اسم نوع المساعدة مطلوب."})
    return name


def add_assistance_type(document: Document, name: str) -> Tuple[Document, AssistanceType]:
    assistance = AssistanceType(id=next_id(a.id for a in document.assistance_types), name=_assistance_name(name))
    return document.model_copy(update={"assistance_types": document.assistance_types + [assistance]}), assistance


def rename_assistance_type(document: Document, type_id: int, name: str) -> Document:
    current = document.get_assistance_type(type_id)
    if current is None:
        raise RecordNotFound("Assistance type not found")
    updated = current.model_copy(update={"name": _assistance_name(name)})
    return document.model_copy(update={
        "assistance_types": _replace(document.assistance_types, lambda a: a.id == type_id, updated),
    })


def delete_assistance_types(document: Document, type_ids: Iterable[int]) -> Document:
    # Operations keep their assistance_id
    ids = set(type_ids)
    return document.model_copy(update={
        "assistance_types": [a for a in document.assistance_types if a.id not in ids],
    })


# --- OPERATION FUNCTIONS ---

def _validate_operation(document: Document, data: OperationIn) -> dict:
    errors = {}
    ben_id = data.beneficiary_national_id.strip()
    beneficiary = document.get_beneficiary(ben_id)
    if not ben_id:
        errors["beneficiary_national_id"] = "الرقم القومي للمستفيد مطلوب."
    elif beneficiary is None:
        errors["beneficiary_national_id"] = "الرقم القومي للمستفيد غير موجود."
    elif beneficiary.is_blacklisted:
        errors["beneficiary_national_id"] = "هذا المستفيد محظور ولا يمكن إضافة عمليات له."
    if not data.assistance_id or document.get_assistance_type(data.assistance_id) is None:
        errors["assistance_id"] = "نوع المساعدة مطلوب."
    if data.amount <= 0:
        errors["amount"] = "قيمة المساعدة يجب أن تكون أكبر من صفر."
    require(errors, "spending_entity", data.spending_entity, "جهة الإنفاق مطلوبة.")
    require(errors, "date", data.date, "تاريخ تقديم الطلب مطلوب.")
    if data.status == "accepted" and not data.acceptance_date:
        errors["acceptance_date"] = "تاريخ القبول مطلوب."
    if data.status == "pending" and not data.pending_date:
        errors["pending_date"] = "تاريخ التعليق مطلوب."
    if data.status == "accepted" and data.disbursement_status and not data.disbursement_date:
        errors["disbursement_date"] = "تاريخ الصرف مطلوب عند تحديد حالة الصرف."
    return errors


def _operation_fields(data: OperationIn) -> dict:
    """Form values with the fields that do not apply to the status cleared."""
    fields = data.model_dump()
    fields["beneficiary_national_id"] = data.beneficiary_national_id.strip()
    fields["spending_entity"] = data.spending_entity.strip()
    accepted = data.status == "accepted"
    fields["acceptance_date"] = data.acceptance_date if accepted else None
    fields["pending_date"] = data.pending_date if data.status == "pending" else None
    fields["disbursement_status"] = data.disbursement_status if accepted else None
    fields["disbursement_date"] = data.disbursement_date if accepted and data.disbursement_status else None
    return fields


def add_operation(document: Document, data: OperationIn) -> Tuple[Document, Operation]:
    errors = _validate_operation(document, data)
    if errors:
        raise ValidationFailed(errors)
    operation = Operation(
        id=next_id(o.id for o in document.operations),
        code=next_code((o.code for o in document.operations), OPERATION_PREFIX),
        **_operation_fields(data),
    )
    return document.model_copy(update={"operations": document.operations + [operation]}), operation


def update_operation(document: Document, operation_id: int, data: OperationIn) -> Tuple[Document, Operation, bool]:
    """Edits an operation; its beneficiary is fixed and a bad code is replaced."""
    current = document.get_operation(operation_id)
    if current is None:
        raise RecordNotFound("Operation not found")
    data = data.model_copy(update={"beneficiary_national_id": current.beneficiary_national_id})
    errors = _validate_operation(document, data)
    if errors:
        raise ValidationFailed(errors)

    code = current.code
    others = [o.code for o in document.operations if o.id != operation_id]
    corrected = _needs_new_code(code, others, OPERATION_PREFIX)
    if corrected:
        code = next_code((o.code for o in document.operations), OPERATION_PREFIX)
        logger.info("Corrected operation code %r -> %s", current.code, code)

    updated = current.model_copy(update={**_operation_fields(data), "code": code})
    operations = _replace(document.operations, lambda o: o.id == operation_id, updated)
    return document.model_copy(update={"operations": operations}), updated, corrected


def delete_operations(document: Document, operation_ids: Iterable[int]) -> Document:
    ids = set(operation_ids)
    return document.model_copy(update={"operations": [o for o in document.operations if o.id not in ids]})


# --- TASK FUNCTIONS ---

def _own_task(document: Document, user_id: int, task_id: int) -> Task:
    # Other users' tasks are reported as missing
    task = next((t for t in document.tasks if t.id == task_id and t.user_id == user_id), None)
    if task is None:
        raise RecordNotFound("Task not found")
    return task


def _task_text(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationFailed({"text": "نص المهمة مطلوب."})
    return text


def _put_task(document: Document, task: Task) -> Document:
    return document.model_copy(update={"tasks": _replace(document.tasks, lambda t: t.id == task.id, task)})


def add_task(document: Document, user_id: int, text: str, now: Optional[datetime] = None) -> Tuple[Document, Task]:
    stamp = utc_timestamp(now)
    task = Task(
        id=next_id(t.id for t in document.tasks),
        user_id=user_id,
        text=_task_text(text),
        is_completed=False,
        created_at=stamp,
        updated_at=stamp,
    )
    return document.model_copy(update={"tasks": document.tasks + [task]}), task


def update_task_text(document: Document, user_id: int, task_id: int, text: str, now: Optional[datetime] = None) -> Document:
    task = _own_task(document, user_id, task_id)
    return _put_task(document, task.model_copy(update={"text": _task_text(text), "updated_at": utc_timestamp(now)}))


def toggle_task(document: Document, user_id: int, task_id: int, now: Optional[datetime] = None) -> Document:
    task = _own_task(document, user_id, task_id)
    return _put_task(document, task.model_copy(update={
        "is_completed": not task.is_completed,
        "updated_at": utc_timestamp(now),
    }))


def delete_task(document: Document, user_id: int, task_id: int) -> Document:
    _own_task(document, user_id, task_id)
    return document.model_copy(update={"tasks": [t for t in document.tasks if t.id != task_id]})


# --- SETTINGS ---

def update_organization(document: Document, name: str, logo: str = "") -> Document:
    errors = {}
    require(errors, "name", name, "اسم المؤسسة مطلوب.")
    logo = logo or ""
    if logo and not logo.startswith("data:image/png"):
        errors["logo"] = "يجب أن يكون الشعار صورة بصيغة PNG."
    if errors:
        raise ValidationFailed(errors)
    return document.model_copy(update={"organization_name": name.strip(), "organization_logo": logo})
