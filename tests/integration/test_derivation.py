from __future__ import annotations

import pytest

from ammcore.integration.derivation import HashDerivation


def test_pool_authority_is_deterministic_and_scoped() -> None:
    d = HashDerivation("prog-1")
    a = d.derive("pool-1", 3)
    assert a == HashDerivation("prog-1").derive("pool-1", 3)
    assert a.startswith("0x") and len(a) == 66
    assert a != d.derive("pool-1", 4)
    assert a != d.derive("pool-2", 3)
    assert a != HashDerivation("prog-2").derive("pool-1", 3)


def test_state_address_depends_on_seed_and_program() -> None:
    d = HashDerivation("prog-1")
    assert d.state_address("AmmState") == HashDerivation("prog-1").state_address("AmmState")
    assert d.state_address("AmmState") != d.state_address("Other")
    assert d.state_address("AmmState") != HashDerivation("prog-2").state_address("AmmState")


def test_domains_do_not_collide() -> None:
    d = HashDerivation("prog-1")
    assert d.derive("AmmState", 0) != d.state_address("AmmState")


def test_rejects_bad_inputs() -> None:
    with pytest.raises(ValueError):
        HashDerivation("")
    with pytest.raises(ValueError):
        HashDerivation("p").derive("pool", 256)
