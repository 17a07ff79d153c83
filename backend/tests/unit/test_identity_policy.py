import pytest

from app.domain.identity import policy


@pytest.mark.parametrize("raw,expected", [("  Alice_01 ", "alice_01"), ("BOB", "bob"), ("abc", "abc")])
def test_guard_username_normalises(raw, expected):
    assert policy.guard_username(raw) == expected


@pytest.mark.parametrize(
    "raw,reason",
    [
        ("ab", "username_too_short"),
        ("x" * 31, "username_too_long"),
        ("bad name", "username_invalid_chars"),
        ("dash-name", "username_invalid_chars"),
    ],
)
def test_guard_username_rejects(raw, reason):
    with pytest.raises(policy.IdentityPolicyError) as exc:
        policy.guard_username(raw)
    assert exc.value.reason == reason


def test_normalise_email():
    assert policy.normalise_email("  Someone@Example.COM ") == "someone@example.com"


@pytest.mark.asyncio
async def test_login_rate_limit(fake_redis):
    for _ in range(policy.LOGIN_PER_MINUTE):
        await policy.enforce_login_rate("alice")
    with pytest.raises(policy.IdentityPolicyError) as exc:
        await policy.enforce_login_rate("alice")
    assert exc.value.reason == "rate_limited"
    # other usernames have their own budget
    await policy.enforce_login_rate("bob")


@pytest.mark.asyncio
async def test_pwreset_rate_limit(fake_redis):
    for _ in range(policy.PWRESET_PER_HOUR):
        await policy.enforce_pwreset_request_rate("a@example.com")
    with pytest.raises(policy.IdentityPolicyError):
        await policy.enforce_pwreset_request_rate("a@example.com")
