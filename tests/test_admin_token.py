from app.infrastructure.security.admin_token import verify_admin_token


def test_matching_token_is_accepted():
    assert verify_admin_token("abc", "abc", "production") is True


def test_wrong_or_missing_token_is_rejected():
    assert verify_admin_token("abd", "abc", "production") is False
    assert verify_admin_token(None, "abc", "dev") is False


def test_unconfigured_token_only_allowed_in_dev():
    assert verify_admin_token(None, None, "dev") is True
    assert verify_admin_token(None, None, "LOCAL") is True
    assert verify_admin_token("anything", None, "production") is False
