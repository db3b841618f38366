# charity_records/seed.py
"""Built-in data used on first start and when a restore lacks users or tasks."""
from typing import List

from charity_records.config import settings
from charity_records.schemas import (
    AssistanceType, Beneficiary, Document, Employee, Note, Operation, Task, User,
)
from charity_records.security import hash_password

VOLUNTEER_NAME = "متطوع"

# Governorate -> cities, used by the employee and beneficiary forms
GOVERNORATES = {
    "القاهرة": ["عين شمس", "السلام", "المرج", "المطرية", "النزهة", "مصر الجديدة", "شرق مدينة نصر", "غرب مدينة نصر", "الوايلي", "باب الشعرية", "وسط القاهرة", "عابدين", "موسكي", "الخليفة", "المقطم", "السيدة زينب", "مصر القديمة", "دار السلام", "البساتين", "المعادي", "حلوان", "التبين", "15 مايو"],
    "الجيزة": ["الجيزة", "العجوزة", "الدقي", "الهرم", "بولاق الدكرور", "العمرانية", "الوراق", "إمبابة", "شمال الجيزة", "جنوب الجيزة", "6 أكتوبر", "الشيخ زايد", "الحوامدية", "البدرشين", "العياط", "أطفيح", "الصف", "أوسيم", "كرداسة", "أبو النمرس", "منشأة القناطر"],
    "الإسكندرية": ["أول المنتزه", "ثاني المنتزه", "شرق", "وسط", "غرب", "الجمرك", "العجمي", "العامرية", "برج العرب"],
    "القليوبية": ["بنها", "قليوب", "شبرا الخيمة", "القناطر الخيرية", "الخانكة", "كفر شكر", "طوخ", "شبين القناطر", "العبور"],
    "الغربية": ["طنطا", "المحلة الكبرى", "كفر الزيات", "زفتى", "السنطة", "قطور", "بسيون", "سمنود"],
    "المنوفية": ["شبين الكوم", "منوف", "مدينة السادات", "أشمون", "الباجور", "قويسنا", "بركة السبع", "تلا", "الشهداء"],
    "البحيرة": ["دمنهور", "كفر الدوار", "رشيد", "إدكو", "أبو حمص", "حوش عيسى", "الدلنجات", "المحمودية", "الرحمانية", "إيتاي البارود", "شبراخيت", "كوم حمادة", "بدر", "وادي النطرون", "أبو المطامير"],
    "الشرقية": ["الزقازيق", "العاشر من رمضان", "بلبيس", "منيا القمح", "أبو حماد", "ههيا", "فاقوس", "الإبراهيمية", "ديرب نجم", "كفر صقر", "أولاد صقر", "الحسينية", "صان الحجر القبلية", "منشأة أبو عمر", "القنايات", "مشتول السوق", "أبو كبير"],
    "الدقهلية": ["المنصورة", "طلخا", "ميت غمر", "السنبلاوين", "أجا", "بلقاس", "دكرنس", "المنزلة", "شربين", "المطرية", "الجمالية", "منية النصر", "بني عبيد", "نبروه", "تمي الأمديد"],
    "كفر الشيخ": ["كفر الشيخ", "دسوق", "فوه", "مطوبس", "البرلس", "بلطيم", "الحامول", "بيلا", "الرياض", "سيدي سالم", "قلين"],
    "دمياط": ["دمياط", "دمياط الجديدة", "رأس البر", "فارسكور", "كفر سعد", "الزرو", "كفر البطيخ"],
    "الإسماعيلية": ["الإسماعيلية", "فايد", "القنطرة شرق", "القنطرة غرب", "أبو صوير", "القصاصين الجديدة", "التل الكبير"],
    "بورسعيد": ["شرق", "الغرب", "المناخ", "الزهور", "الضواحي", "بورفؤاد"],
    "السويس": ["السويس", "الأربعين", "عتاقة", "فيصل", "الجناين"],
    "شمال سيناء": ["العريش", "بئر العبد", "الشيخ زويد", "رفح", "الحسنة", "نخل"],
    "جنوب سيناء": ["الطور", "شرم الشيخ", "دهب", "نويبع", "طابا", "سانت كاترين", "أبو زنيمة", "أبو رديس", "رأس سدر"],
    "الفيوم": ["الفيوم", "إطسا", "سنورس", "طامية", "يوسف الصديق", "أبشواي"],
    "بني سويف": ["بني سويف", "الواسطى", "ناصر", "إهناسيا", "ببا", "سمسطا", "الفشن"],
    "المنيا": ["المنيا", "المنيا الجديدة", "مغاغة", "بني مزار", "مطاي", "سمالوط", "أبو قرقاص", "ملوي", "دير مواس", "العدوة"],
    "أسيوط": ["أسيوط", "ديروط", "القوصية", "منفلوط", "أبنوب", "أبو تيج", "الغنايم", "ساحل سليم", "البداري", "صدفا"],
    "سوهاج": ["سوهاج", "أخميم", "جرجا", "طما", "طهطا", "المراغة", "المنشأة", "البلينا", "دار السلام", "جهينة", "ساقلتة"],
    "قنا": ["قنا", "أبو تشت", "نجع حمادي", "دشنا", "فرشوط", "قفط", "قوص", "نقادة", "الوقف"],
    "الأقصر": ["الأقصر", "القرنة", "أرمنت", "إسنا", "الطود", "الزينية", "البياضية"],
    "أسوان": ["أسوان", "دراو", "كوم أمبو", "نصر النوبة", "إدفو"],
    "البحر الأحمر": ["الغردقة", "رأس غارب", "سفاجا", "القصير", "مرسى علم", "الشلاتين", "حلايب"],
    "الوادي الجديد": ["الخارجة", "باريس", "موط", "الفرافرة", "بلاط"],
}

LEGACY_MANAGER_USERNAMES = ("Admin", "Tarek")
BOOTSTRAP_USERNAME = "Admin"

_DEFAULT_USERS = [
    {"id": 1, "name": "Admin User", "mobile": "01000000000", "username": "Admin", "password": "Admin", "role": "manager"},
    {"id": 2, "name": "Tarek User", "mobile": "01011112222", "username": "Tarek", "password": "123", "role": "manager"},
]


def default_users() -> List[User]:
    return [User(**{**u, "password": hash_password(u["password"])}) for u in _DEFAULT_USERS]


def default_tasks() -> List[Task]:
    return [
        Task(id=1, user_id=1, text="متابعة حالة المستفيد محمد عبد الله", is_completed=False,
             created_at="2023-11-20T10:00:00.000Z", updated_at="2023-11-20T10:00:00.000Z"),
        Task(id=2, user_id=1, text="التحضير لاجتماع اللجنة الأسبوعي", is_completed=True,
             created_at="2023-11-18T15:30:00.000Z", updated_at="2023-11-19T09:00:00.000Z"),
        Task(id=3, user_id=2, text="مراجعة طلبات المساعدات الجديدة", is_completed=False,
             created_at="2023-11-21T11:00:00.000Z", updated_at="2023-11-21T11:00:00.000Z"),
    ]


def default_employees() -> List[Employee]:
    return [
        Employee(name="أحمد محمود", national_id="28501010100111", phone="01012345678",
                 governorate="القاهرة", city="مدينة نصر", area="الحي السابع"),
        Employee(name="فاطمة علي", national_id="29002020100222", phone="01123456789",
                 governorate="الجيزة", city="6 أكتوبر", area="الحي المتميز"),
        Employee(name=VOLUNTEER_NAME, national_id=settings.VOLUNTEER_NATIONAL_ID, phone="N/A",
                 governorate="N/A", city="N/A", area="N/A"),
    ]


def default_beneficiaries() -> List[Beneficiary]:
    return [
        Beneficiary(
            code="B001", name="سارة حسن", national_id="29503030100333", join_date="2023-01-15",
            phone="01234567890", alternative_phone="01011112222", governorate="القاهرة",
            city="مدينة نصر", area="الحي العاشر", detailed_address="عمارة 5، شارع 9، بجوار صيدلية العزبي",
            job="ربة منزل", family_members=4, marital_status="married", spouse_name="أحمد محمود علي",
            employee_national_id="28501010100111",
            notes=[Note(text="تحتاج إلى مساعدة طبية عاجلة للطفل الأصغر.", date="2023-10-26T10:00:00.000Z")],
            researcher_receipt_date="2023-10-20", research_submission_date="2023-10-25",
            research_result="accepted",
        ),
        Beneficiary(
            code="B002", name="محمد عبد الله", national_id="29204040200444", join_date="2022-11-20",
            phone="01567890123", alternative_phone="", governorate="الجيزة", city="الهرم",
            area="شارع فيصل", detailed_address="شارع العروبة، منزل 10، الدور 3", job="عامل يومية",
            family_members=5, marital_status="married", spouse_name="فاطمة سيد أحمد",
            employee_national_id="29002020100222", researcher_receipt_date="2023-11-01",
            research_submission_date="",
        ),
        Beneficiary(
            code="B003", name="علي إبراهيم", national_id="28805050100555", join_date="2023-05-10",
            phone="01098765432", alternative_phone="01298765432", governorate="القاهرة",
            city="المعادي", area="دجلة", detailed_address="15 شارع النصر، أمام محطة المترو",
            job="بدون عمل", family_members=3, marital_status="widowed",
            employee_national_id="28501010100111",
            notes=[Note(text="تم توفير فرصة عمل مؤقتة له الشهر الماضي.", date="2023-11-15T14:30:00.000Z")],
            researcher_receipt_date="", research_submission_date="",
        ),
    ]


def default_assistance_types() -> List[AssistanceType]:
    return [
        AssistanceType(id=1, name="مساعدة مالية"),
        AssistanceType(id=2, name="مواد غذائية"),
        AssistanceType(id=3, name="علاج طبي"),
    ]


def default_operations() -> List[Operation]:
    return [
        Operation(id=1, code="OP001", beneficiary_national_id="29503030100333", assistance_id=1, amount=500,
                  date="2023-02-01", committee_number="C1", committee_decision_description="Approved for monthly aid.",
                  spending_entity="تبرعات أهل الخير", details="دفعة أولى من مساعدة مالية شهرية.", status="accepted",
                  acceptance_date="2023-02-02", disbursement_status="disbursed", disbursement_date="2023-02-05"),
        Operation(id=2, code="OP002", beneficiary_national_id="29204040200444", assistance_id=2, amount=300,
                  date="2023-03-10", committee_number="C1", committee_decision_description="Standard food package.",
                  spending_entity="مؤسسة الجارحي", details="كرتونة مواد غذائية لشهر مارس.", status="accepted",
                  acceptance_date="2023-03-11", disbursement_status="disbursed", disbursement_date="2023-03-12"),
        Operation(id=3, code="OP003", beneficiary_national_id="29503030100333", assistance_id=2, amount=250,
                  date="2023-04-05", committee_number="C2", committee_decision_description="Requires further review.",
                  spending_entity="مؤسسة الجارحي", details="مساعدة غذائية إضافية.", status="pending",
                  pending_date="2023-04-06"),
        Operation(id=4, code="OP004", beneficiary_national_id="29503030100333", assistance_id=3, amount=1000,
                  date="2023-06-15", committee_number="C3", committee_decision_description="Urgent medical need approved.",
                  spending_entity="فاعل خير", details="تكاليف عملية جراحية للابن.", status="accepted",
                  acceptance_date="2023-06-16", disbursement_status="in_progress"),
        Operation(id=5, code="OP005", beneficiary_national_id="29503030100333", assistance_id=1, amount=400,
                  date="2023-08-20", committee_number="C4", committee_decision_description="Beneficiary did not meet criteria.",
                  spending_entity="تبرعات", details="", status="rejected"),
        Operation(id=6, code="OP006", beneficiary_national_id="28805050100555", assistance_id=1, amount=700,
                  date="2023-09-01", committee_number="C5", committee_decision_description="Rent assistance approved.",
                  spending_entity="مؤسسة الجارحي", details="مساعدة إيجار لمدة شهر.", status="accepted",
                  acceptance_date="2023-09-01", disbursement_status="disbursed", disbursement_date="2023-09-02"),
    ]


def default_document() -> Document:
    """Built-in data used on first start or when stored data is unusable."""
    return Document(
        users=default_users(),
        employees=default_employees(),
        beneficiaries=default_beneficiaries(),
        assistance_types=default_assistance_types(),
        operations=default_operations(),
        tasks=default_tasks(),
        organization_name=settings.ORGANIZATION_NAME,
        organization_logo="",
    )

