from charity_records.auth import authenticate, normalize_username
from charity_records.security import create_session_token, read_session_token


def test_normalize_username():
    assert normalize_username(" ad-min ") == "admin"
    assert normalize_username("T.a_rek") == "tarek"


def test_login_tolerates_formatting(document):
    user = authenticate(document, " ad-min ", "Admin")
    assert user is not None
    assert user.username == "Admin"


def test_password_is_trimmed(document):
    assert authenticate(document, "tarek", " 123 ").username == "Tarek"


def test_wrong_password_fails(document):
    assert authenticate(document, "Admin", "admin") is None
    assert authenticate(document, "Admin", "") is None


def test_unknown_user_fails(document):
    assert authenticate(document, "nobody", "Admin") is None


def test_session_token_round_trip():
    assert read_session_token(create_session_token("Admin")) == "Admin"


def test_tampered_session_token_rejected():
    token = create_session_token("Admin")
    assert read_session_token(token[:-2] + "xx") is None
    assert read_session_token("garbage") is None
