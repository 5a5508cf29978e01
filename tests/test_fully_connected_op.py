"""Tests for the FullyConnected forward/backward kernel on the CPU backend."""
import numpy as np
import pytest

import staticop as so
from staticop.base import OpReqType
from conftest import blobs, make_inputs

W = OpReqType.WRITE_TO
ADD = OpReqType.ADD_TO
INPLACE = OpReqType.WRITE_INPLACE
NULL = OpReqType.NULL_OP


def _bind(hidden=4, no_bias=False):
    return so.FullyConnectedSymbol(num_hidden=hidden, no_bias=no_bias).bind('cpu')


def _reference_forward(data, weight, bias=None):
    """Naive triple loop: out[b, h] = sum_f data[b, f] * weight[h, f] + bias[h]."""
    x = data.reshape(data.shape[0], -1)
    out = np.zeros((x.shape[0], weight.shape[0]), dtype=x.dtype)
    for b in range(x.shape[0]):
        for h in range(weight.shape[0]):
            acc = 0.0
            for f in range(x.shape[1]):
                acc += x[b, f] * weight[h, f]
            if bias is not None:
                acc += bias[h]
            out[b, h] = acc
    return out.reshape(data.shape[:-1] + (weight.shape[0],))


def _forward(op, arrays, run_ctx):
    data, weight = arrays[0], arrays[1]
    out = np.empty(data.shape[:-1] + (weight.shape[0],), dtype=data.dtype)
    op.forward(so.Option(), run_ctx, blobs(*arrays), [W], blobs(out))
    return out


def _backward(op, arrays, grad, run_ctx, req=None):
    grads = [np.zeros_like(a) for a in arrays]
    req = req or [W] * len(arrays)
    op.backward(run_ctx, blobs(grad), blobs(*arrays), [], req, blobs(*grads))
    return grads


# ──────────────────────── Forward ─────────────────────────────────────

def test_forward_example_exact(run_ctx):
    data = np.array([[1, 2, 3], [4, 5, 6]], dtype=np.float32).reshape(2, 1, 1, 3)
    weight = np.array([[1, 0, 0],
                       [0, 1, 0],
                       [0, 0, 1],
                       [1, 1, 1]], dtype=np.float32)
    bias = np.zeros(4, dtype=np.float32)
    out = _forward(_bind(4), [data, weight, bias], run_ctx)
    assert out.shape == (2, 1, 1, 4)
    expected = np.array([[1, 2, 3, 6], [4, 5, 6, 15]], dtype=np.float32)
    np.testing.assert_array_equal(out.reshape(2, 4), expected)


@pytest.mark.parametrize("batch,feature,hidden", [(1, 1, 1), (2, 3, 4), (7, 5, 3)])
def test_forward_matches_reference(rng, run_ctx, batch, feature, hidden):
    arrays = make_inputs(rng, batch, feature, hidden)
    out = _forward(_bind(hidden), arrays, run_ctx)
    assert out.shape == (batch, 1, 1, hidden)
    np.testing.assert_allclose(out, _reference_forward(*arrays), rtol=1e-10)


def test_forward_overwrites_stale_output(rng, run_ctx):
    arrays = make_inputs(rng)
    out = np.full((3, 1, 1, 4), 123.0)
    _bind().forward(so.Option(), run_ctx, blobs(*arrays), [W], blobs(out))
    np.testing.assert_allclose(out, _reference_forward(*arrays))


def test_forward_float32(rng, run_ctx):
    arrays = make_inputs(rng, dtype=np.float32)
    out = _forward(_bind(), arrays, run_ctx)
    assert out.dtype == np.float32
    np.testing.assert_allclose(out, _reference_forward(*arrays), rtol=1e-5, atol=1e-5)


# ──────────────────────── Backward ────────────────────────────────────

def test_backward_matches_analytic_adjoints(rng, run_ctx):
    data, weight, bias = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    gdata, gweight, gbias = _backward(_bind(), [data, weight, bias], grad, run_ctx)

    g2 = grad.reshape(3, 4)
    x2 = data.reshape(3, 5)
    np.testing.assert_allclose(gweight, g2.T @ x2)
    np.testing.assert_allclose(gbias, g2.sum(axis=0))
    np.testing.assert_allclose(gdata.reshape(3, 5), g2 @ weight)


def test_backward_matches_finite_differences(rng, run_ctx):
    arrays = make_inputs(rng, batch=2, feature=3, hidden=2)
    op = _bind(2)
    probe = rng.standard_normal((2, 1, 1, 2))

    def loss():
        return float(np.sum(_forward(op, arrays, run_ctx) * probe))

    analytic = _backward(op, arrays, probe, run_ctx)
    eps = 1e-6
    for arr, g in zip(arrays, analytic):
        numeric = np.zeros_like(arr)
        it = np.nditer(arr, flags=['multi_index'])
        for _ in it:
            i = it.multi_index
            orig = arr[i]
            arr[i] = orig + eps
            up = loss()
            arr[i] = orig - eps
            down = loss()
            arr[i] = orig
            numeric[i] = (up - down) / (2 * eps)
        np.testing.assert_allclose(g, numeric, rtol=1e-5, atol=1e-7)


def test_backward_add_to_accumulates(rng, run_ctx):
    arrays = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    op = _bind()
    fresh = _backward(op, arrays, grad, run_ctx)

    acc = [np.ones_like(a) for a in arrays]
    op.backward(run_ctx, blobs(grad), blobs(*arrays), [], [ADD] * 3, blobs(*acc))
    for a, f in zip(acc, fresh):
        np.testing.assert_allclose(a, f + 1.0)


def test_backward_null_op_leaves_buffer(rng, run_ctx):
    arrays = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    grads = [np.full_like(a, 7.0) for a in arrays]
    _bind().backward(run_ctx, blobs(grad), blobs(*arrays), [], [W, W, NULL], blobs(*grads))
    np.testing.assert_array_equal(grads[2], 7.0)
    assert not np.all(grads[0] == 7.0)


def test_backward_data_grad_in_place(rng, run_ctx):
    """Writing the data gradient into the data buffer gives the WRITE_TO result."""
    data, weight, bias = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    op = _bind()
    expected = _backward(op, [data.copy(), weight, bias], grad, run_ctx)

    gweight = np.zeros_like(weight)
    gbias = np.zeros_like(bias)
    data_blob = so.TensorBlob(data)
    op.backward(run_ctx, blobs(grad), [data_blob, so.TensorBlob(weight), so.TensorBlob(bias)],
                [], [INPLACE, W, W],
                [data_blob, so.TensorBlob(gweight), so.TensorBlob(gbias)])
    np.testing.assert_allclose(data, expected[0])
    np.testing.assert_allclose(gweight, expected[1])
    np.testing.assert_allclose(gbias, expected[2])


def test_no_bias_equals_zero_bias(rng, run_ctx):
    data, weight, _ = make_inputs(rng)
    zeros = np.zeros(4)
    grad = rng.standard_normal((3, 1, 1, 4))

    out_nb = _forward(_bind(no_bias=True), [data, weight], run_ctx)
    out_zb = _forward(_bind(), [data, weight, zeros], run_ctx)
    np.testing.assert_array_equal(out_nb, out_zb)

    gd_nb, gw_nb = _backward(_bind(no_bias=True), [data, weight], grad, run_ctx)
    gd_zb, gw_zb, _ = _backward(_bind(), [data, weight, zeros], grad, run_ctx)
    np.testing.assert_array_equal(gd_nb, gd_zb)
    np.testing.assert_array_equal(gw_nb, gw_zb)


def test_non_unit_middle_dims_flatten_into_rows(rng, run_ctx):
    data = rng.standard_normal((2, 3, 1, 5))
    weight = rng.standard_normal((4, 5))
    bias = rng.standard_normal(4)
    out = _forward(_bind(), [data, weight, bias], run_ctx)
    assert out.shape == (2, 3, 1, 4)
    np.testing.assert_allclose(out, data @ weight.T + bias)


# ──────────────────────── Contract violations ─────────────────────────

def test_forward_rejects_wrong_input_count(rng, run_ctx):
    data, weight, bias = make_inputs(rng)
    out = np.zeros((3, 1, 1, 4))
    with pytest.raises(so.ContractViolation, match="expects 3 inputs"):
        _bind().forward(so.Option(), run_ctx, blobs(data, weight), [W], blobs(out))
    with pytest.raises(so.ContractViolation, match="expects 2 inputs"):
        _bind(no_bias=True).forward(so.Option(), run_ctx, blobs(data, weight, bias),
                                    [W], blobs(out))


@pytest.mark.parametrize("req", [ADD, INPLACE, NULL])
def test_forward_requires_write_to(rng, run_ctx, req):
    arrays = make_inputs(rng)
    out = np.full((3, 1, 1, 4), -1.0)
    with pytest.raises(so.ContractViolation, match="WRITE_TO"):
        _bind().forward(so.Option(), run_ctx, blobs(*arrays), [req], blobs(out))
    np.testing.assert_array_equal(out, -1.0)


def test_forward_rejects_shape_mismatch_without_writing(rng, run_ctx):
    data, _, bias = make_inputs(rng)
    bad_weight = rng.standard_normal((4, 6))
    out = np.full((3, 1, 1, 4), -1.0)
    with pytest.raises(so.ContractViolation, match="feature size"):
        _bind().forward(so.Option(), run_ctx, blobs(data, bad_weight, bias), [W], blobs(out))
    np.testing.assert_array_equal(out, -1.0)

    bad_out = np.zeros((3, 1, 1, 5))
    with pytest.raises(so.ContractViolation, match="output shape"):
        _bind().forward(so.Option(), run_ctx, blobs(*make_inputs(rng)), [W], blobs(bad_out))


def test_backward_rejects_in_place_weight_grad(rng, run_ctx):
    arrays = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    grads = [np.full_like(a, -1.0) for a in arrays]
    with pytest.raises(so.ContractViolation, match="weight gradient in place"):
        _bind().backward(run_ctx, blobs(grad), blobs(*arrays), [],
                         [W, INPLACE, W], blobs(*grads))
    for g in grads:
        np.testing.assert_array_equal(g, -1.0)


@pytest.mark.parametrize("req", [
    [W, W, 'add'],
    ['write', W, W],
    [W, W, None],
    [W, W, 3],
])
def test_backward_rejects_bad_request_tag_without_writing(rng, run_ctx, req):
    arrays = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    grads = [np.full_like(a, -1.0) for a in arrays]
    with pytest.raises(so.ContractViolation, match="OpReqType"):
        _bind().backward(run_ctx, blobs(grad), blobs(*arrays), [], req, blobs(*grads))
    for g in grads:
        np.testing.assert_array_equal(g, -1.0)


def test_backward_null_op_skips_computation(rng, run_ctx, monkeypatch):
    arrays = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    grads = [np.full_like(a, 7.0) for a in arrays]
    op = _bind()
    calls = []

    def fail(name):
        def _record(*args, **kwargs):
            calls.append(name)
            raise AssertionError(f"{name} called for a NULL_OP slot")
        return _record

    monkeypatch.setattr(op.backend, 'dot', fail('dot'))
    monkeypatch.setattr(op.backend, 'sum_rows', fail('sum_rows'))
    op.backward(run_ctx, blobs(grad), blobs(*arrays), [], [NULL] * 3, blobs(*grads))
    assert calls == []
    for g in grads:
        np.testing.assert_array_equal(g, 7.0)


def test_backward_rejects_count_mismatch(rng, run_ctx):
    arrays = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    grads = [np.zeros_like(a) for a in arrays]
    op = _bind()
    with pytest.raises(so.ContractViolation):
        op.backward(run_ctx, blobs(grad, grad), blobs(*arrays), [], [W] * 3, blobs(*grads))
    with pytest.raises(so.ContractViolation):
        op.backward(run_ctx, blobs(grad), blobs(*arrays), [], [W] * 2, blobs(*grads))
    with pytest.raises(so.ContractViolation):
        op.backward(run_ctx, blobs(grad), blobs(*arrays), [], [W] * 3, blobs(*grads[:2]))


def test_backward_rejects_bad_grad_shape_without_writing(rng, run_ctx):
    arrays = make_inputs(rng)
    grad = rng.standard_normal((3, 1, 1, 4))
    grads = [np.full_like(a, -1.0) for a in arrays]
    grads[2] = np.full(5, -1.0)
    with pytest.raises(so.ContractViolation, match="bias gradient"):
        _bind().backward(run_ctx, blobs(grad), blobs(*arrays), [], [W] * 3, blobs(*grads))
    for g in grads:
        np.testing.assert_array_equal(g, -1.0)
