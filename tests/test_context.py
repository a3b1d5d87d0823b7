from local_invoke import context as context_module
from local_invoke.context import build_context


def test_deadline_from_timeout():
    context = build_context("createKey", timeout=3, start_ms=1_000)

    assert context.deadline_ms == 4_000


def test_default_timeout_is_six_seconds():
    context = build_context("createKey", start_ms=0)

    assert context.deadline_ms == 6_000


def test_remaining_time_is_recomputed(monkeypatch):
    context = build_context("createKey", timeout=3, start_ms=1_000)

    monkeypatch.setattr(context_module, "now_ms", lambda: 1_500)
    assert context.get_remaining_time_in_millis() == 2_500

    monkeypatch.setattr(context_module, "now_ms", lambda: 3_900)
    assert context.get_remaining_time_in_millis() == 100

    monkeypatch.setattr(context_module, "now_ms", lambda: 5_000)
    assert context.get_remaining_time_in_millis() == -1_000


def test_lambda_attributes():
    context = build_context("createKey", region="us-east-1")

    assert context.function_version == "$LATEST"
    assert context.invoked_function_arn == "arn:aws:lambda:us-east-1:456645664566:function:createKey"
    assert context.log_group_name == "/aws/lambda/createKey"
    assert context.aws_request_id in context.log_stream_name


def test_contexts_are_not_shared():
    assert build_context("fn").aws_request_id != build_context("fn").aws_request_id
