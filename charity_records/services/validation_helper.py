# charity_records/services/validation_helper.py
import re
from typing import Dict, Optional

NATIONAL_ID_PATTERN = r"(2|3)[0-9]{13}"
MOBILE_PATTERN = r"01[0125][0-9]{8}"

MSG_MOBILE_FORMAT = "رقم المحمول يجب أن يكون 11 رقمًا ويبدأ بـ 010 أو 011 أو 012 أو 015."
MSG_NATIONAL_ID_FORMAT = "الرقم القومي يجب أن يكون 14 رقمًا ويبدأ بـ 2 أو 3."


def is_national_id(value: str) -> bool:
    return bool(re.fullmatch(NATIONAL_ID_PATTERN, value or ""))


def is_mobile(value: str) -> bool:
    return bool(re.fullmatch(MOBILE_PATTERN, value or ""))


def require(errors: Dict[str, str], field: str, value, message: str):
    """Records ``message`` for ``field`` when the value is blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        errors[field] = message


def check_mobile(errors: Dict[str, str], field: str, value: Optional[str], required: bool = True):
    """
    Validates an Egyptian mobile number (010/011/012/015 + 8 digits).
    An optional field is only checked when filled in.
    """
    value = (value or "").strip()
    if not value:
        if required:
            errors[field] = "رقم المحمول مطلوب."
        return
    if not is_mobile(value):
        errors[field] = MSG_MOBILE_FORMAT


def check_national_id(errors: Dict[str, str], field: str, value: str):
    value = (value or "").strip()
    if not value:
        errors[field] = "الرقم القومي مطلوب."
    elif not is_national_id(value):
        errors[field] = MSG_NATIONAL_ID_FORMAT
