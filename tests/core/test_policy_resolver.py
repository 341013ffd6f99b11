import pytest

from fscleaner.core.policy import PolicyError, PolicyResolver

POLICY = {"acme": 30, "globex": 0, "default": 7}

def test_listed_tenants_get_their_own_days():
    r = PolicyResolver(POLICY)
    assert r.resolve("acme") == 30
    assert r.resolve("globex") == 0  # zero is a real value, not a miss

def test_unlisted_tenants_fall_back_to_default():
    r = PolicyResolver(POLICY)
    for tenant in ("initech", "", "ACME", "default-ish"):
        assert r.resolve(tenant) == 7

def test_resolver_copies_mapping():
    src = dict(POLICY)
    r = PolicyResolver(src)
    src["acme"] = 1
    assert r.resolve("acme") == 30
    d = r.as_dict()
    d["acme"] = 2
    assert r.resolve("acme") == 30
    assert r.default_days == 7

def test_missing_default_rejected():
    with pytest.raises(PolicyError):
        PolicyResolver({"acme": 30})

@pytest.mark.parametrize("bad", [-1, 1.5, "7", True, None])
def test_invalid_day_values_rejected(bad):
    with pytest.raises(PolicyError):
        PolicyResolver({"default": 7, "acme": bad})
