from __future__ import annotations

import pytest

from exam_portal.core.identity import (
    AdminCredentials,
    IdentityCookieCodec,
    PortalContext,
    identity_from_email,
)


def test_identity_is_stable_per_email():
    first = identity_from_email("Ada@Example.com")
    second = identity_from_email("  ada@example.com ", "Countess")
    assert first.user_id == second.user_id
    assert first.display_name == "ada"
    assert second.display_name == "Countess"
    assert identity_from_email("grace@example.com").user_id != first.user_id


@pytest.mark.parametrize("email", ["", "   ", "no-at-sign"])
def test_identity_requires_email(email):
    with pytest.raises(ValueError):
        identity_from_email(email)


def test_cookie_round_trip_and_tampering():
    codec = IdentityCookieCodec("secret")
    identity = identity_from_email("ada@example.com", "Ada")
    value = codec.encode(identity)

    assert codec.decode(value) == identity
    assert codec.decode(value[:-2] + "xx") is None
    assert IdentityCookieCodec("other-secret").decode(value) is None
    assert codec.decode(None) is None


def test_context_roles():
    identity = identity_from_email("ada@example.com")
    assert PortalContext().is_authenticated is False
    assert PortalContext().role is None
    assert PortalContext(identity=identity).role == "user"
    assert PortalContext(is_admin=True).role == "admin"


def test_admin_credentials():
    credentials = AdminCredentials("admin", "s3cret")
    assert credentials.check(" admin ", "s3cret") is True
    assert credentials.check("admin", "wrong") is False
    assert credentials.check("root", "s3cret") is False


def test_unconfigured_admin_credentials_refuse(caplog):
    credentials = AdminCredentials("", "")
    with caplog.at_level("ERROR"):
        assert credentials.check("", "") is False
    assert "not configured" in caplog.text
