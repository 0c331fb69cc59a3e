# qreg/tests/test_register.py
import numpy as np
import pytest
from qreg import gates as G
from qreg.errors import InvalidArgument, InvariantViolation, NonPhysicalState, Unsupported
from qreg.operators import Operator
from qreg.register import QubitRegister

H = Operator(G.H())
X = Operator(G.X())
CNOT = Operator(G.CNOT())

def random_unitary(dim, seed=0):
    rng = np.random.default_rng(seed)
    a = rng.normal(size=(dim, dim)) + 1j*rng.normal(size=(dim, dim))
    q, r = np.linalg.qr(a)
    return q * (np.diag(r) / np.abs(np.diag(r)))

def partition(reg):
    return sorted(q for _, qubits in reg.containers() for q in qubits)

# ---------------------------------------------------------------------
# construction

@pytest.mark.parametrize("bad", [0, -3, 2.0, True])
def test_rejects_bad_size(bad):
    with pytest.raises(InvalidArgument):
        QubitRegister(bad)

@pytest.mark.parametrize("n", [1, 2, 3, 5])
def test_fresh_register_measures_zero(n):
    reg = QubitRegister(n, seed=0)
    assert reg.get_numbits() == n
    assert reg.measure_all() == [False] * n

def test_fresh_register_is_one_container_per_qubit():
    reg = QubitRegister(4)
    assert [qubits for _, qubits in reg.containers()] == [[0], [1], [2], [3]]
    reg.check_invariants()

# ---------------------------------------------------------------------
# lookups

def test_get_containers_holding():
    reg = QubitRegister(3)
    assert len(reg.get_containers_holding(0, 1, 1)) == 2
    reg.couple(0, 2)
    conts = reg.get_containers_holding(2, 0)
    assert len(conts) == 1
    assert reg.qubits_in(conts[0]) == [0, 2]

@pytest.mark.parametrize("qubits", [(), (-1,), (3,), (0, 7), (1.0,)])
def test_get_containers_holding_rejects(qubits):
    with pytest.raises(InvalidArgument):
        QubitRegister(3).get_containers_holding(*qubits)

def test_locate():
    reg = QubitRegister(3).couple(2, 0)
    qc, pos = reg.locate(0)
    assert pos == 1 and reg.qubits_in(qc) == [2, 0]

# ---------------------------------------------------------------------
# couple

def test_couple_is_kronecker_product():
    a = np.array([0.6, 0.8])
    b = np.array([np.sqrt(0.5), 1j*np.sqrt(0.5)])
    reg = QubitRegister(2)
    reg.set_amps(a, 0).set_amps(b, 1)
    reg.couple(0, 1)
    (qc,) = reg.get_containers_holding(0, 1)
    # qubit 0 is local bit 0, the low bit of the index
    assert np.allclose(qc.get_amps(), np.kron(b, a))

def test_couple_is_idempotent():
    reg = QubitRegister(3).do_op(H, 0).do_op(H, 1)
    reg.couple(0, 1)
    (qc,) = reg.get_containers_holding(0, 1)
    before = qc.get_amps()
    reg.couple(0, 1)
    (again,) = reg.get_containers_holding(0, 1)
    assert again is qc
    assert np.array_equal(again.get_amps(), before)

def test_couple_absorbs_whole_containers():
    reg = QubitRegister(4)
    reg.couple(0, 1)
    reg.couple(1, 2)
    (qc,) = reg.get_containers_holding(2)
    assert reg.qubits_in(qc) == [0, 1, 2]
    assert partition(reg) == [0, 1, 2, 3]
    reg.check_invariants()

def test_couple_rejects_duplicates_without_merging():
    reg = QubitRegister(3)
    with pytest.raises(InvalidArgument):
        reg.couple(0, 1, 0)
    assert len(reg.containers()) == 3

def test_partition_invariant_after_random_ops():
    rng = np.random.default_rng(11)
    n = 7
    reg = QubitRegister(n, seed=11)
    for _ in range(20):
        k = int(rng.integers(1, 4))
        qubits = [int(q) for q in rng.choice(n, size=k, replace=False)]
        if rng.integers(0, 2):
            reg.couple(*qubits)
        else:
            reg.do_op(Operator(random_unitary(1 << k, int(rng.integers(1000)))), *qubits)
        reg.check_invariants()
        assert partition(reg) == list(range(n))
    for qc, _ in reg.containers():
        qc.check_normalized()

def test_state_vector_survives_couple():
    reg = QubitRegister(3).do_op(H, 0).do_op(Operator(G.RX(0.3)), 2)
    before = reg.state_vector()
    reg.couple(2, 0)
    assert np.allclose(reg.state_vector(), before)

# ---------------------------------------------------------------------
# set_amps

def test_set_amps_one_then_measure():
    reg = QubitRegister(1)
    reg.set_amps([0, 1], 0)
    assert reg.measure(0) is True

def test_set_amps_reorders_into_container_order():
    reg = QubitRegister(2).couple(0, 1)
    # amps bit 0 is qubit 1, bit 1 is qubit 0: this is q1=1, q0=0
    reg.set_amps([0, 1, 0, 0], 1, 0)
    (qc,) = reg.get_containers_holding(0)
    assert np.allclose(qc.get_amps(), [0, 0, 1, 0])
    assert reg.measure(1) is True
    assert reg.measure(0) is False

def test_set_amps_across_containers_is_unsupported():
    reg = QubitRegister(2).do_op(H, 0)
    before = [qc.get_amps() for qc, _ in reg.containers()]
    with pytest.raises(Unsupported):
        reg.set_amps([1, 0, 0, 0], 0, 1)
    after = [qc.get_amps() for qc, _ in reg.containers()]
    assert len(after) == 2
    for b, a in zip(before, after):
        assert np.array_equal(b, a)

def test_set_amps_unsupported_when_containers_hold_other_qubits():
    reg = QubitRegister(3).do_op(H, 0).couple(0, 1)
    before = [qc.get_amps() for qc, _ in reg.containers()]
    # qubit 0 shares a container with qubit 1 but is not named
    with pytest.raises(Unsupported):
        reg.set_amps([0, 0, 0, 1], 1, 2)
    after = [qc.get_amps() for qc, _ in reg.containers()]
    assert len(after) == 2
    for b, a in zip(before, after):
        assert np.array_equal(b, a)

def test_set_amps_rejects_non_numeric():
    reg = QubitRegister(1)
    with pytest.raises(InvalidArgument):
        reg.set_amps(["up", "down"], 0)
    with pytest.raises(InvalidArgument):
        reg.set_amps([None, 1], 0)
    assert reg.measure(0) is False

def test_set_amps_rejects_bad_lengths():
    reg = QubitRegister(2).couple(0, 1)
    with pytest.raises(InvalidArgument):
        reg.set_amps([1, 0], 0, 1)
    # a strict subset of a container
    with pytest.raises(InvalidArgument):
        reg.set_amps([1, 0], 0)

# ---------------------------------------------------------------------
# do_op and measure

def test_do_op_returns_self_for_chaining():
    reg = QubitRegister(2)
    assert reg.do_op(H, 0).do_op(CNOT, 0, 1) is reg

def test_bell_pair_outcomes_agree():
    for seed in range(8):
        reg = QubitRegister(2, seed=seed).do_op(H, 0).do_op(CNOT, 0, 1)
        s = np.sqrt(0.5)
        assert np.allclose(reg.state_vector(), [s, 0, 0, s])
        a = reg.measure(0)
        assert reg.measure(1) == a
        # measurement does not split the container
        assert len(reg.containers()) == 1

def test_same_seed_same_outcomes():
    outcomes = []
    for _ in range(2):
        reg = QubitRegister(4, seed=42)
        for q in range(4):
            reg.do_op(H, q)
        outcomes.append(reg.measure_all())
    assert outcomes[0] == outcomes[1]

def test_unitary_round_trip():
    reg = QubitRegister(3).do_op(H, 0).do_op(CNOT, 0, 1).do_op(Operator(G.RX(0.9)), 2)
    reg.couple(0, 1, 2)
    (qc,) = reg.get_containers_holding(0)
    before = qc.get_amps()
    u = Operator(random_unitary(4, 3))
    reg.do_op(u, 2, 0).do_op(u.dagger(), 2, 0)
    assert np.allclose(qc.get_amps(), before, atol=1e-12)

def test_toffoli_on_110_gives_111():
    reg = QubitRegister(3).do_op(X, 0).do_op(X, 1)
    reg.do_op(G.toffoli(), 0, 1, 2)
    assert reg.measure_all() == [True, True, True]

def test_toffoli_on_100_is_unchanged():
    reg = QubitRegister(3).do_op(X, 0)
    reg.do_op(G.toffoli(), 0, 1, 2)
    assert reg.measure_all() == [True, False, False]

def test_toffoli_with_permuted_qubits():
    # controls are qubits 2 and 0, target is qubit 1
    reg = QubitRegister(3).do_op(X, 2).do_op(X, 0)
    reg.do_op(G.toffoli(), 2, 0, 1)
    assert reg.measure_all() == [True, True, True]

def test_do_op_failure_leaves_register_unchanged():
    reg = QubitRegister(3)
    with pytest.raises(InvalidArgument):
        reg.do_op(CNOT, 0, 5)
    with pytest.raises(InvalidArgument):
        reg.do_op(CNOT, 0)
    with pytest.raises(InvalidArgument):
        reg.do_op(CNOT, 1, 1)
    with pytest.raises(InvalidArgument):
        reg.do_op(G.CNOT(), 0, 1)
    assert len(reg.containers()) == 3

def test_check_norm_config():
    reg = QubitRegister(1, config=None, seed=0)
    reg.config = reg.config.with_overrides(check_norm=True)
    with pytest.raises(NonPhysicalState):
        reg.do_op(Operator(np.array([[2, 0], [0, 2]])), 0)

def test_check_invariants_detects_corruption():
    reg = QubitRegister(3).couple(0, 1)
    reg._where[2] = reg._where[0]
    with pytest.raises(InvariantViolation):
        reg.check_invariants()

def test_measure_follows_branch_weights():
    ones = 0
    for seed in range(2000):
        reg = QubitRegister(1, seed=seed).set_amps([np.sqrt(0.9), np.sqrt(0.1)], 0)
        ones += reg.measure(0)
    assert 140 < ones < 260

def test_measure_zero_state_is_non_physical():
    reg = QubitRegister(2).set_amps([0, 0], 1)
    with pytest.raises(NonPhysicalState):
        reg.measure(1)
    # the other qubit is untouched
    assert reg.measure(0) is False
